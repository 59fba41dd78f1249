"""Command-line interface for the tingrid package."""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

import numpy as np

from tingrid.config import (
    DerivativeDirection,
    InputFormat,
    RecordMode,
    Region,
    Registration,
    TriangulateConfig,
    parse_empty_value,
    parse_spacing,
)
from tingrid.exceptions import ConfigurationError, TinGridError
from tingrid.geometry.grid import OutputGrid
from tingrid.geometry.points import PointStore
from tingrid.mesh.edges import extract_edges
from tingrid.mesh.triangulation import DelaunayEngine, PrecomputedTriangulation, TriangulationEngine
from tingrid.output.grids import GridWriter
from tingrid.output.records import RecordWriter
from tingrid.output.vectors import VectorWriter
from tingrid.parsers.landxml import LandXMLParser
from tingrid.parsers.records import read_points, read_triangles
from tingrid.parsers.slopes import read_slope_grid
from tingrid.raster.rasterize import TriangleRasterizer
from tingrid.raster.uncertainty import UncertaintyModel
from tingrid.utils.logging import get_logger, setup_logging
from tingrid.utils.validation import validate_input_file, validate_landxml_file

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_PARSE_ERROR = 2
EXIT_UNEXPECTED = 3


@dataclass
class TriangulationResult:
    """Everything a run computed before any output was written."""

    points: PointStore
    triangles: Optional[np.ndarray] = None
    edges: Optional[np.ndarray] = None
    voronoi_edges: Optional[np.ndarray] = None
    grid: Optional[OutputGrid] = None
    epsg_code: Optional[int] = None


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="tingrid",
        description="Optimal (Delaunay) triangulation and gridding of Cartesian table data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tingrid points.txt > triangles.txt
  tingrid points.txt -M -Z -o edges.txt
  tingrid points.txt -G surface.tif -R0/100/0/100 -I1
  tingrid points.txt -G sigma.tif -R0/100/0/100 -I1 -u slopes.tif
  tingrid points.txt -Q -R0/100/0/100 --vector-output voronoi.geojson
  tingrid surface.xml --input-format landxml -S --vector-output tin.dxf
        """,
    )

    parser.add_argument(
        "input_files",
        type=Path,
        nargs="*",
        help="Input tables with x,y[,z][,h,v] records (default: stdin)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        dest="output_file",
        help="Record output file (default: stdout)",
    )
    parser.add_argument(
        "--input-format",
        type=str,
        choices=[f.value for f in InputFormat],
        default=InputFormat.TABLE.value,
        help="Point input format (default: table)",
    )
    parser.add_argument(
        "--triangles",
        type=Path,
        dest="triangles_file",
        help="Table of vertex-index triples to use instead of computing a triangulation",
    )

    # Gridding options
    parser.add_argument(
        "-G",
        type=Path,
        dest="grid_file",
        help="Grid the plane estimates to this GeoTIFF (requires -R and -I)",
    )
    parser.add_argument(
        "-R",
        type=str,
        dest="region",
        help="Region west/east/south/north",
    )
    parser.add_argument(
        "-I",
        type=str,
        dest="spacing",
        help="Grid spacing dx[/dy]",
    )
    parser.add_argument(
        "-r",
        action="store_true",
        dest="pixel",
        help="Use pixel (cell-center) registration [gridline registration]",
    )
    parser.add_argument(
        "-D",
        type=str.lower,
        choices=[d.value for d in DerivativeDirection],
        dest="derivative",
        help="Take derivative in the x- or y-direction (only with -G) [z value]",
    )
    parser.add_argument(
        "-E",
        type=str,
        dest="empty_value",
        help="Value to use for empty nodes [NaN]",
    )
    parser.add_argument(
        "-u",
        type=Path,
        dest="slope_file",
        help="Write propagated uncertainty using this slope grid; expects (x,y,z,h,v) input",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used for rasterizing triangles (default: 1); speeds up only when "
        "triangles cover many grid nodes, since small per-triangle work holds the GIL",
    )

    # Record output options
    parser.add_argument(
        "-M",
        action="store_true",
        dest="edges",
        help="Output triangle edges as multiple segments separated by segment headers",
    )
    parser.add_argument(
        "-N",
        action="store_true",
        dest="index_table",
        help="Write indices of vertices when -G is used [only write the grid]",
    )
    parser.add_argument(
        "-Q",
        action="store_true",
        dest="voronoi",
        help="Compute Voronoi polygon edges instead (requires -R)",
    )
    parser.add_argument(
        "-S",
        action="store_true",
        dest="polygons",
        help="Output triangle polygons as multiple segments separated by segment headers",
    )
    parser.add_argument(
        "-Z",
        action="store_true",
        dest="elevation",
        help="Expect (x,y,z) data on input and write z with -M or -S; z input is implied by -G",
    )
    parser.add_argument(
        "--vector-output",
        type=Path,
        help="Also save edges/polygons as .shp, .geojson, .gpkg or .dxf",
    )

    # Other options
    parser.add_argument(
        "--epsg",
        type=int,
        dest="epsg_code",
        help="EPSG code for grid and vector output",
    )
    parser.add_argument(
        "-v", "-V", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(args)


def build_config(parsed_args: argparse.Namespace) -> TriangulateConfig:
    """Create and validate the run configuration from parsed arguments."""
    return TriangulateConfig(
        input_files=parsed_args.input_files,
        output_file=parsed_args.output_file,
        input_format=InputFormat(parsed_args.input_format),
        triangles_file=parsed_args.triangles_file,
        grid_file=parsed_args.grid_file,
        spacing=parse_spacing(parsed_args.spacing) if parsed_args.spacing else None,
        region=Region.from_string(parsed_args.region) if parsed_args.region else None,
        registration=Registration.PIXEL if parsed_args.pixel else Registration.GRIDLINE,
        derivative=DerivativeDirection(parsed_args.derivative) if parsed_args.derivative else None,
        empty_value=parse_empty_value(parsed_args.empty_value) if parsed_args.empty_value else None,
        edges=parsed_args.edges,
        index_table=parsed_args.index_table,
        polygons=parsed_args.polygons,
        voronoi=parsed_args.voronoi,
        slope_file=parsed_args.slope_file,
        elevation=parsed_args.elevation,
        vector_output=parsed_args.vector_output,
        epsg_code=parsed_args.epsg_code,
        workers=parsed_args.workers,
        verbose=parsed_args.verbose,
    )


def load_points(config: TriangulateConfig, stream: Optional[TextIO] = None) -> tuple[PointStore, TriangulationEngine, Optional[int]]:
    """Read the input points and choose the triangulation engine.

    Returns:
        (points, engine, epsg_code found in the input)
    """
    logger = get_logger(__name__)
    engine: TriangulationEngine = DelaunayEngine()
    epsg_code = None

    if config.input_format == InputFormat.LANDXML:
        if len(config.input_files) != 1:
            raise ConfigurationError("LandXML input takes exactly one file")
        validate_landxml_file(config.input_files[0])
        surface = LandXMLParser(config.input_files[0]).parse()
        points = surface.points
        epsg_code = surface.epsg_code
        if surface.triangles is not None and not config.voronoi:
            engine = PrecomputedTriangulation(surface.triangles, source=f"surface {surface.name}")
    else:
        for path in config.input_files:
            validate_input_file(path)
        points = read_points(
            config.input_files,
            elevation=config.elevation_mode,
            uncertainty=config.uncertainty,
            stream=stream,
        )

    logger.info(f"Loaded {points.num_points} points")

    if config.triangles_file is not None:
        validate_input_file(config.triangles_file, "Triangle")
        triangles = read_triangles(config.triangles_file, n_points=points.num_points)
        engine = PrecomputedTriangulation(triangles, source=str(config.triangles_file))

    return points, engine, epsg_code


def compute(config: TriangulateConfig, stream: Optional[TextIO] = None) -> TriangulationResult:
    """Run every geometry step of the workflow without writing output."""
    logger = get_logger(__name__)

    # Step 1: Read points
    points, engine, input_epsg = load_points(config, stream=stream)
    result = TriangulationResult(points=points, epsg_code=config.epsg_code or input_epsg)

    # Step 2: Triangulate
    if config.voronoi:
        result.voronoi_edges = engine.voronoi(points.x, points.y, config.region)
        return result

    result.triangles = points.check_triangles(engine.triangulate(points.x, points.y))

    # Step 3: Grid via planar triangle segments
    if config.grid:
        grid = OutputGrid(
            config.region,
            config.spacing,
            registration=config.registration,
            fill_value=config.fill_value,
        )
        logger.info(f"Creating grid: {grid.n_columns}x{grid.n_rows} nodes")

        uncertainty = None
        slopes = None
        if config.uncertainty:
            uncertainty = UncertaintyModel(delta_min=grid.dx)
            slopes = read_slope_grid(config.slope_file, grid)

        rasterizer = TriangleRasterizer(
            points,
            grid,
            derivative=config.derivative,
            uncertainty=uncertainty,
            slopes=slopes,
            workers=config.workers,
        )
        rasterizer.rasterize(result.triangles)
        result.grid = grid

    # Step 4: Unique edges
    if config.record_mode == RecordMode.EDGES:
        result.edges = extract_edges(result.triangles)

    return result


def write_outputs(
    config: TriangulateConfig,
    result: TriangulationResult,
    stdout: Optional[TextIO] = None,
    command: Optional[str] = None,
) -> None:
    """Write grid, records and vector output for a completed computation."""
    logger = get_logger(__name__)

    if result.grid is not None:
        tags = {"command": command} if command else None
        GridWriter(epsg_code=result.epsg_code).write(result.grid, config.grid_file, tags=tags)

    mode = config.record_mode
    if mode != RecordMode.NONE:
        with_z = config.elevation and result.points.has_elevation
        if config.output_file is not None:
            config.output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config.output_file, "w", encoding="utf-8") as f:
                _write_records(RecordWriter(f), mode, result, with_z)
            logger.info(f"Records saved to: {config.output_file}")
        else:
            _write_records(RecordWriter(stdout or sys.stdout), mode, result, with_z)

    if config.vector_output is not None:
        writer = VectorWriter(epsg_code=result.epsg_code)
        with_z = config.elevation and result.points.has_elevation
        if mode == RecordMode.VORONOI:
            gdf = writer.voronoi_frame(result.voronoi_edges)
        elif mode == RecordMode.EDGES:
            gdf = writer.edges_frame(result.points, result.edges, with_z=with_z)
        else:
            gdf = writer.polygons_frame(result.points, result.triangles, with_z=with_z)
        writer.save(gdf, config.vector_output, config.vector_format)


def _write_records(writer: RecordWriter, mode: RecordMode, result: TriangulationResult, with_z: bool) -> None:
    if mode == RecordMode.VORONOI:
        writer.write_voronoi_edges(result.voronoi_edges)
    elif mode == RecordMode.EDGES:
        writer.write_edges(result.points, result.edges, with_z=with_z)
    elif mode == RecordMode.POLYGONS:
        writer.write_polygons(result.points, result.triangles, with_z=with_z)
    elif mode == RecordMode.INDEX_TABLE:
        writer.write_index_table(result.triangles)


def run_triangulation(
    config: TriangulateConfig,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    command: Optional[str] = None,
) -> TriangulationResult:
    """Run the complete workflow; nothing is written unless every geometry step succeeds."""
    logger = get_logger(__name__)

    result = compute(config, stream=stdin)
    write_outputs(config, result, stdout=stdout, command=command)

    logger.info("Done!")
    return result


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    argv = sys.argv[1:] if args is None else args
    parsed_args = parse_args(argv)

    # Records on stdout must not mix with log lines
    records_to_stdout = parsed_args.output_file is None
    setup_logging(
        verbose=parsed_args.verbose,
        stream=sys.stderr if records_to_stdout else sys.stdout,
    )
    logger = get_logger(__name__)

    try:
        config = build_config(parsed_args)
    except ConfigurationError as e:
        logger.error(f"Syntax error: {e}")
        return EXIT_PARSE_ERROR

    try:
        run_triangulation(config, command=" ".join(["tingrid", *argv]))
        return EXIT_OK

    except ConfigurationError as e:
        logger.error(f"Syntax error: {e}")
        return EXIT_PARSE_ERROR
    except TinGridError as e:
        logger.error(f"Error: {e}")
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return EXIT_UNEXPECTED


if __name__ == "__main__":
    sys.exit(main())
