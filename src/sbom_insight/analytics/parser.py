"""
CycloneDX SBOM loader.

Reads the subset of a CycloneDX JSON document the analytics consume:
components (id, name, version, type, licenses, hashes) and the
``dependencies`` ref/dependsOn list. Everything else in the schema is
ignored apart from a few metadata fields kept for reporting.

Supported inputs:
- CycloneDX JSON file (1.4, 1.5, 1.6)
- CycloneDX JSON string
- Already-decoded CycloneDX dictionary
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sbom_insight.analytics.models import Component, ComponentType, DependencyEdge

logger = logging.getLogger(__name__)


@dataclass
class SBOMDocument:
    """Parsed SBOM content handed to the graph builder."""

    components: list[Component] = field(default_factory=list)
    dependencies: list[DependencyEdge] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    root_component: str | None = None

    @property
    def component_count(self) -> int:
        return len(self.components)

    @property
    def dependency_count(self) -> int:
        """Number of declared dependency relationships (ref -> target pairs)."""
        return sum(len(dep.depends_on) for dep in self.dependencies)


class SBOMParser:
    """Parser for CycloneDX JSON documents."""

    def __init__(self, include_root_component: bool = False):
        """Initialize parser.

        Args:
            include_root_component: Add ``metadata.component`` to the
                component list when it is not already present.
        """
        self.include_root_component = include_root_component

    def parse(self, file_path: str | Path) -> SBOMDocument:
        """Parse an SBOM file.

        Args:
            file_path: Path to a CycloneDX JSON file

        Returns:
            SBOMDocument with components and dependency entries
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"SBOM file not found: {path}")

        logger.info(f"Parsing SBOM file: {path}")
        document = self.parse_json(path.read_text(encoding="utf-8"))
        document.metadata["source"] = str(path)
        return document

    def parse_json(self, content: str) -> SBOMDocument:
        """Parse SBOM from a JSON string."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON content: {e}") from e
        return self.parse_dict(data)

    def parse_dict(self, data: Any) -> SBOMDocument:
        """Parse an already-decoded CycloneDX document."""
        if not isinstance(data, dict):
            raise ValueError(f"SBOM document must be a JSON object, got {type(data).__name__}")
        if "spdxVersion" in data:
            raise ValueError("SPDX documents are not supported; provide CycloneDX JSON")
        if "bomFormat" in data:
            if data["bomFormat"] != "CycloneDX":
                raise ValueError(f"Unsupported bomFormat: {data['bomFormat']}")
        elif "components" not in data:
            raise ValueError("Cannot determine SBOM format: expected a CycloneDX document")

        bom_metadata = data.get("metadata") or {}
        if not isinstance(bom_metadata, dict):
            raise ValueError("metadata must be a JSON object")

        document = SBOMDocument()
        document.metadata = {
            "format": "CycloneDX",
            "spec_version": data.get("specVersion", "unknown"),
            "serial_number": data.get("serialNumber", ""),
            "version": data.get("version", 1),
            "timestamp": bom_metadata.get("timestamp", ""),
        }

        seen: set[str] = set()

        root = bom_metadata.get("component")
        if root is not None and not isinstance(root, dict):
            raise ValueError("metadata.component must be a JSON object")
        if root:
            root_component = self._parse_component(root)
            document.root_component = root_component.id
            if self.include_root_component:
                document.components.append(root_component)
                seen.add(root_component.id)

        for raw in _entries(data, "components"):
            component = self._parse_component(raw)
            if component.id in seen:
                logger.warning(f"Duplicate component id ignored: {component.id}")
                continue
            seen.add(component.id)
            document.components.append(component)

        for entry in _entries(data, "dependencies"):
            ref = entry.get("ref", "")
            if not ref:
                continue
            depends_on = entry.get("dependsOn") or []
            if not isinstance(depends_on, list) or not all(isinstance(t, str) for t in depends_on):
                raise ValueError(f"dependsOn of {ref} must be a list of bom-refs")
            document.dependencies.append(DependencyEdge(ref=ref, depends_on=tuple(depends_on)))

        logger.info(
            f"Parsed CycloneDX SBOM: {document.component_count} components, "
            f"{document.dependency_count} declared dependencies"
        )
        return document

    def _parse_component(self, component: dict) -> Component:
        """Parse a single CycloneDX component."""
        name = component.get("name", "")
        version = component.get("version") or None
        purl = component.get("purl", "")

        component_id = component.get("bom-ref") or purl
        if not component_id:
            component_id = f"{name}@{version}" if version else name
            logger.warning(f"Component without bom-ref, using derived id: {component_id}")

        licenses = []
        for entry in _entries(component, "licenses"):
            if "license" in entry:
                lic = entry["license"] or {}
                if not isinstance(lic, dict):
                    raise ValueError(f"license of {component_id} must be a JSON object")
                licenses.append(lic.get("name") or lic.get("id") or "Unknown License")
            elif "expression" in entry:
                licenses.append(entry["expression"])

        hashes = tuple(
            f"{h.get('alg', '')}:{h.get('content', '')}" for h in _entries(component, "hashes")
        )

        return Component(
            id=component_id,
            name=name,
            version=version,
            type=ComponentType.from_raw(component.get("type")),
            description=component.get("description", "") or "",
            licenses=tuple(licenses),
            hashes=hashes,
            purl=purl,
        )


def _entries(container: dict, key: str) -> list[dict]:
    """List of JSON objects stored under ``key``; absent or null means empty."""
    entries = container.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"'{key}' must be a list, got {type(entries).__name__}")
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"'{key}' entries must be JSON objects, got {type(entry).__name__}")
    return entries


def create_sample_sbom() -> str:
    """Create a sample CycloneDX SBOM for demos and tests."""
    sample = {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "version": 1,
        "metadata": {
            "component": {
                "name": "inventory-service",
                "version": "3.2.0",
                "type": "application",
                "bom-ref": "pkg:npm/inventory-service@3.2.0",
            }
        },
        "components": [
            {
                "bom-ref": "pkg:npm/inventory-service@3.2.0",
                "name": "inventory-service",
                "version": "3.2.0",
                "type": "application",
                "licenses": [{"license": {"id": "Apache-2.0"}}],
            },
            {
                "bom-ref": "pkg:npm/express@4.17.1",
                "name": "express",
                "version": "4.17.1",
                "type": "framework",
                "licenses": [{"license": {"id": "MIT"}}],
                "hashes": [{"alg": "SHA-256", "content": "a1b2c3"}],
            },
            {
                "bom-ref": "pkg:npm/lodash@4.17.20",
                "name": "lodash",
                "version": "4.17.20",
                "type": "library",
                "licenses": [{"license": {"id": "MIT"}}],
            },
            {
                "bom-ref": "pkg:npm/axios@0.21.0",
                "name": "axios",
                "version": "0.21.0",
                "type": "library",
                "licenses": [{"license": {"id": "MIT"}}],
            },
            {
                "bom-ref": "pkg:npm/body-parser@2.0.0-beta.1",
                "name": "body-parser",
                "version": "2.0.0-beta.1",
                "type": "library",
            },
            {
                "bom-ref": "pkg:maven/org.apache.logging.log4j/log4j-core@2.14.0",
                "name": "log4j-core",
                "version": "2.14.0",
                "type": "library",
                "licenses": [{"license": {"id": "Apache-2.0"}}],
            },
            {
                "bom-ref": "pkg:npm/left-pad@1.3.0",
                "name": "left-pad",
                "version": "1.3.0",
                "type": "library",
                "licenses": [{"license": {"name": "WTFPL"}}],
            },
        ],
        "dependencies": [
            {
                "ref": "pkg:npm/inventory-service@3.2.0",
                "dependsOn": [
                    "pkg:npm/express@4.17.1",
                    "pkg:npm/axios@0.21.0",
                    "pkg:maven/org.apache.logging.log4j/log4j-core@2.14.0",
                ],
            },
            {
                "ref": "pkg:npm/express@4.17.1",
                "dependsOn": ["pkg:npm/lodash@4.17.20", "pkg:npm/body-parser@2.0.0-beta.1"],
            },
            {
                "ref": "pkg:npm/axios@0.21.0",
                "dependsOn": ["pkg:npm/lodash@4.17.20"],
            },
        ],
    }
    return json.dumps(sample, indent=2)
