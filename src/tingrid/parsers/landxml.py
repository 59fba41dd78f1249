"""LandXML reader for TIN surface points and faces."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from lxml import etree

from tingrid.exceptions import InputExhaustedError, LandXMLParseError
from tingrid.geometry.points import PointStore
from tingrid.utils.logging import get_logger


@dataclass
class LandXMLSurface:
    """Points of a LandXML surface and, when present, its faces as index triples."""

    name: str
    points: PointStore
    triangles: Optional[np.ndarray]
    epsg_code: Optional[int] = None


class LandXMLParser:
    """Parser for LandXML files containing TIN surfaces."""

    # Namespace patterns for different LandXML versions
    NAMESPACE_PATTERN = re.compile(r"\{(http://www\.landxml\.org/schema/LandXML-\d+\.\d+)\}")

    def __init__(self, file_path: Path):
        """Initialize the parser.

        Args:
            file_path: Path to the LandXML file.
        """
        self.file_path = Path(file_path)
        self.logger = get_logger(__name__)
        self._tree: Optional[etree._ElementTree] = None
        self._root: Optional[etree._Element] = None
        self._namespace: Optional[str] = None
        self._nsmap: dict[str, str] = {}
        self.epsg_code: Optional[int] = None

    def _parse_file(self) -> None:
        """Parse the XML file and extract namespace."""
        if self._tree is not None:
            return

        try:
            self._tree = etree.parse(str(self.file_path))
            self._root = self._tree.getroot()
        except etree.XMLSyntaxError as e:
            raise LandXMLParseError(f"Invalid XML syntax: {e}")
        except OSError as e:
            raise LandXMLParseError(f"Error reading file: {e}")

        # Extract namespace
        if self._root.tag.startswith("{"):
            match = self.NAMESPACE_PATTERN.match(self._root.tag)
            if match:
                self._namespace = match.group(1)
                self._nsmap["lx"] = self._namespace
                self.logger.debug(f"Detected namespace: {self._namespace}")

        self._extract_epsg_code()

    def _extract_epsg_code(self) -> None:
        """Extract EPSG code from CoordinateSystem element."""
        coord_sys = self._find(self._root, ".//lx:CoordinateSystem")
        if coord_sys is not None:
            epsg_attr = coord_sys.get("epsgCode")
            if epsg_attr:
                try:
                    self.epsg_code = int(epsg_attr)
                    self.logger.info(f"Found EPSG code: {self.epsg_code}")
                except ValueError:
                    self.logger.warning(f"Invalid EPSG code: {epsg_attr}")

    def _find(self, elem: etree._Element, xpath: str) -> Optional[etree._Element]:
        if self._nsmap:
            return elem.find(xpath, self._nsmap)
        return elem.find(xpath.replace("lx:", ""))

    def _findall(self, elem: etree._Element, xpath: str) -> list[etree._Element]:
        if self._nsmap:
            return elem.findall(xpath, self._nsmap)
        return elem.findall(xpath.replace("lx:", ""))

    def parse(self) -> LandXMLSurface:
        """Parse the first surface of the file.

        Returns:
            The surface points (with elevation) and its faces as 0-based
            index triples, or ``triangles=None`` when the surface has no faces.

        Raises:
            InputExhaustedError: If the surface has no points.
        """
        self._parse_file()

        surfaces = self._findall(self._root, ".//lx:Surface")
        if not surfaces:
            raise LandXMLParseError("No Surface elements found in LandXML file")

        surface_elem = surfaces[0]
        surface_name = surface_elem.get("name", "Unnamed")
        self.logger.info(f"Parsing surface: {surface_name}")

        ids, coords = self._parse_points(surface_elem)
        if not ids:
            raise InputExhaustedError("LandXML surface has no points")

        # Point ids are arbitrary labels; sort them to fix the index order
        order = np.argsort(ids, kind="stable")
        sorted_ids = [ids[i] for i in order]
        xyz = np.asarray(coords, dtype=np.float64)[order]
        id_to_index = {pid: idx for idx, pid in enumerate(sorted_ids)}

        triangles = self._parse_faces(surface_elem, id_to_index)

        points = PointStore(x=xyz[:, 0], y=xyz[:, 1], z=xyz[:, 2], name=surface_name)
        self.logger.info(
            f"Parsed surface: {points.num_points} points, "
            f"{0 if triangles is None else len(triangles)} faces"
        )
        return LandXMLSurface(
            name=surface_name,
            points=points,
            triangles=triangles,
            epsg_code=self.epsg_code,
        )

    def _parse_points(self, surface_elem: etree._Element) -> tuple[list[int], list[tuple[float, float, float]]]:
        """Parse point elements from the surface.

        Points are in format: "northing easting elevation"
        """
        pnts_elem = self._find(surface_elem, ".//lx:Definition/lx:Pnts")
        if pnts_elem is None:
            raise LandXMLParseError("No Pnts element found in surface")

        ids: list[int] = []
        coords: list[tuple[float, float, float]] = []
        seen: set[int] = set()

        for p_elem in self._findall(pnts_elem, "lx:P"):
            point_id = p_elem.get("id")
            if point_id is None:
                continue

            try:
                point_id = int(point_id)
            except ValueError:
                self.logger.warning(f"Invalid point ID: {point_id}")
                continue

            if point_id in seen:
                raise LandXMLParseError(f"Duplicate point ID: {point_id}")

            content = p_elem.text
            if content is None:
                continue

            try:
                parts = content.strip().split()
                if len(parts) < 3:
                    self.logger.warning(f"Point {point_id} has insufficient coordinates")
                    continue

                # LandXML format: northing easting elevation
                northing = float(parts[0])
                easting = float(parts[1])
                elevation = float(parts[2])
            except ValueError as e:
                self.logger.warning(f"Error parsing point {point_id}: {e}")
                continue

            seen.add(point_id)
            ids.append(point_id)
            coords.append((easting, northing, elevation))

        return ids, coords

    def _parse_faces(
        self, surface_elem: etree._Element, id_to_index: dict[int, int]
    ) -> Optional[np.ndarray]:
        """Parse face (triangle) elements as 0-based index triples.

        Faces are in format: "p1_id p2_id p3_id"
        """
        faces_elem = self._find(surface_elem, ".//lx:Definition/lx:Faces")
        if faces_elem is None:
            return None

        triangles: list[tuple[int, int, int]] = []
        for f_elem in self._findall(faces_elem, "lx:F"):
            # Invisible faces lie outside the surface boundary
            if f_elem.get("i") == "1":
                continue

            content = f_elem.text
            if content is None:
                continue

            try:
                parts = content.strip().split()
                if len(parts) < 3:
                    continue
                p1_id, p2_id, p3_id = int(parts[0]), int(parts[1]), int(parts[2])
            except ValueError as e:
                self.logger.warning(f"Error parsing face: {e}")
                continue

            # Verify points exist
            if all(pid in id_to_index for pid in (p1_id, p2_id, p3_id)):
                triangles.append((id_to_index[p1_id], id_to_index[p2_id], id_to_index[p3_id]))
            else:
                self.logger.warning(
                    f"Triangle references missing points: {p1_id}, {p2_id}, {p3_id}"
                )

        if not triangles:
            return None
        return np.asarray(triangles, dtype=np.int64)
