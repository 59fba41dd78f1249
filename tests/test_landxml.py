import numpy as np
import pytest

from tingrid.exceptions import InputExhaustedError, LandXMLParseError
from tingrid.parsers.landxml import LandXMLParser

SURFACE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<LandXML xmlns="http://www.landxml.org/schema/LandXML-1.2" version="1.2">
  <CoordinateSystem epsgCode="32618"/>
  <Surfaces>
    <Surface name="Existing Ground">
      <Definition surfType="TIN">
        <Pnts>
          <P id="30">20.0 10.0 103.0</P>
          <P id="10">0.0 0.0 100.0</P>
          <P id="20">0.0 10.0 101.0</P>
          <P id="40">bad coordinates here</P>
        </Pnts>
        <Faces>
          <F>10 20 30</F>
          <F i="1">10 30 20</F>
          <F>10 20 99</F>
        </Faces>
      </Definition>
    </Surface>
  </Surfaces>
</LandXML>
"""


@pytest.fixture
def write_xml(tmp_path):
    def _write(text, name="surface.xml"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


def test_parse_surface(write_xml):
    surface = LandXMLParser(write_xml(SURFACE_XML)).parse()

    assert surface.name == "Existing Ground"
    assert surface.epsg_code == 32618

    points = surface.points
    # Sorted by point id; northing/easting swapped to x/y
    np.testing.assert_array_equal(points.x, [0.0, 10.0, 10.0])
    np.testing.assert_array_equal(points.y, [0.0, 0.0, 20.0])
    np.testing.assert_array_equal(points.z, [100.0, 101.0, 103.0])

    # Invisible faces and faces with unknown points are dropped
    np.testing.assert_array_equal(surface.triangles, [[0, 1, 2]])


def test_surface_without_faces(write_xml):
    text = SURFACE_XML.replace("<F>10 20 30</F>", "").replace("<F>10 20 99</F>", "")
    surface = LandXMLParser(write_xml(text)).parse()
    assert surface.triangles is None
    assert surface.points.num_points == 3


def test_surface_without_namespace(write_xml):
    text = SURFACE_XML.replace(' xmlns="http://www.landxml.org/schema/LandXML-1.2"', "")
    surface = LandXMLParser(write_xml(text)).parse()
    assert surface.points.num_points == 3
    assert surface.epsg_code == 32618


def test_surface_without_points_raises(write_xml):
    text = """<LandXML><Surfaces><Surface name="s"><Definition>
    <Pnts></Pnts></Definition></Surface></Surfaces></LandXML>"""
    with pytest.raises(InputExhaustedError):
        LandXMLParser(write_xml(text)).parse()


def test_duplicate_point_id_raises(write_xml):
    text = SURFACE_XML.replace('<P id="30">', '<P id="10">')
    with pytest.raises(LandXMLParseError):
        LandXMLParser(write_xml(text)).parse()


def test_missing_surface_raises(write_xml):
    with pytest.raises(LandXMLParseError):
        LandXMLParser(write_xml("<LandXML></LandXML>")).parse()


def test_invalid_xml_raises(write_xml):
    with pytest.raises(LandXMLParseError):
        LandXMLParser(write_xml("<LandXML><Surfaces>")).parse()
