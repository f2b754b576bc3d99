"""
Sample data generator for GeoExtract tutorials and tests.

Creates a small synthetic raster, a multi-layer GeoPackage and a tiny
Web-Mercator tile pyramid.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_CRS = "EPSG:3857"


def create_sample_raster(
    path: str,
    width: int = 1000,
    height: int = 1000,
    bounds: tuple[float, float, float, float] = (0.0, 0.0, 100.0, 100.0),
    count: int = 1,
    dtype: str = "float32",
    nodata: Optional[float] = None,
    north_up: bool = True,
) -> str:
    """
    Write a gradient raster covering bounds

    Pixel (row, col) of band b holds ``row * 10000 + col + b`` (wrapped for
    byte rasters), which makes resampling results easy to check.

    Args:
        path: Output GeoTIFF path
        width: Raster width in pixels
        height: Raster height in pixels
        bounds: (minx, miny, maxx, maxy) covered by the raster
        count: Number of bands
        dtype: Numpy dtype name
        nodata: Nodata value to declare (None: no nodata)
        north_up: If False, rows grow with y (origin at (minx, miny))

    Returns:
        The path written
    """
    import rasterio
    from rasterio.transform import Affine, from_bounds

    minx, miny, maxx, maxy = bounds
    if north_up:
        transform = from_bounds(minx, miny, maxx, maxy, width, height)
    else:
        transform = Affine((maxx - minx) / width, 0.0, minx, 0.0, (maxy - miny) / height, miny)

    rows = np.arange(height, dtype=np.float64)[:, None]
    cols = np.arange(width, dtype=np.float64)[None, :]
    base = rows * 10000 + cols
    bands = np.stack([base + b for b in range(count)])
    if np.dtype(dtype) == np.uint8:
        bands = np.mod(bands, 251)

    profile = {
        "driver": "GTiff",
        "dtype": dtype,
        "width": width,
        "height": height,
        "count": count,
        "crs": SAMPLE_CRS,
        "transform": transform,
        "nodata": nodata,
    }
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(bands.astype(dtype))

    logger.debug("Created sample raster: %s", path)
    return path


def create_sample_vector(path: str) -> str:
    """
    Write a GeoPackage with "points", "lines" and "polygons" layers

    - points: (0, 0), (5, 0), (100, 0) and one feature without geometry
    - lines: a horizontal line crossing x = 0..100 at y = 50, a diagonal,
      a multi-line and a line far away
    - polygons: a square with a hole and a two-part multipolygon

    Returns:
        The path written
    """
    import geopandas as gpd
    from shapely.geometry import LineString, MultiLineString, MultiPolygon, Point, Polygon

    points = gpd.GeoDataFrame(
        {
            "name": ["origin", "near", "far", "unplaced"],
            "value": [1.0, 2.0, 3.0, float("nan")],
        },
        geometry=[Point(0, 0), Point(5, 0), Point(100, 0), None],
        crs=SAMPLE_CRS,
    )
    lines = gpd.GeoDataFrame(
        {"name": ["horizontal", "diagonal", "pair", "remote"]},
        geometry=[
            LineString([(-50, 50), (150, 50)]),
            LineString([(0, 0), (100, 100)]),
            MultiLineString([[(10, 10), (20, 10)], [(10, 90), (20, 90)]]),
            LineString([(1000, 1000), (1100, 1000)]),
        ],
        crs=SAMPLE_CRS,
    )
    polygons = gpd.GeoDataFrame(
        {"name": ["courtyard", "islands"]},
        geometry=[
            Polygon(
                [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)],
                [[(4, 4), (6, 4), (6, 6), (4, 6), (4, 4)]],
            ),
            MultiPolygon(
                [
                    Polygon([(20, 0), (22, 0), (22, 2), (20, 2)]),
                    Polygon([(30, 0), (32, 0), (32, 2), (30, 2)]),
                ]
            ),
        ],
        crs=SAMPLE_CRS,
    )

    for layer, frame in (("points", points), ("lines", lines), ("polygons", polygons)):
        frame.to_file(path, layer=layer, driver="GPKG", engine="pyogrio")

    logger.debug("Created sample GeoPackage: %s", path)
    return path


def create_sample_pyramid(
    base_path: str,
    levels: Iterable[int] = (0, 1, 2),
    tile_size: int = 16,
    file_ending: str = "tif",
    skip: Iterable[tuple[int, int, int]] = (),
) -> str:
    """
    Write a Web-Mercator tile pyramid ``{base}/{z}/{x}/{y}.{ending}``

    Every pixel of a level-z tile holds the value ``z + 1`` (uint8), so the
    level a request was served from can be read off the result.

    Args:
        base_path: Pyramid root directory
        levels: Zoom levels to generate (complete coverage per level)
        tile_size: Tile width/height in pixels
        file_ending: Tile file extension
        skip: (z, x, y) tiles to leave out

    Returns:
        The pyramid root
    """
    import rasterio
    from rasterio.transform import from_bounds

    from geoextract.grid.tile_grid import WebMercatorGrid

    grid = WebMercatorGrid(tile_size)
    skipped = set(skip)
    written = 0

    for z in levels:
        n = 2 ** z
        for x in range(n):
            for y in range(n):
                if (z, x, y) in skipped:
                    continue
                path = grid.tile_path(base_path, z, x, y, file_ending)
                path.parent.mkdir(parents=True, exist_ok=True)
                profile = {
                    "driver": "GTiff",
                    "dtype": "uint8",
                    "width": tile_size,
                    "height": tile_size,
                    "count": 1,
                    "crs": SAMPLE_CRS,
                    "transform": from_bounds(*grid.tile_bounds(z, x, y), tile_size, tile_size),
                    "nodata": 0,
                }
                with rasterio.open(str(path), "w", **profile) as dst:
                    dst.write(np.full((1, tile_size, tile_size), z + 1, dtype=np.uint8))
                written += 1

    logger.debug("Created %d pyramid tile(s) under %s", written, base_path)
    return base_path


def create_sample_data(output_dir: Optional[str] = None) -> dict[str, str]:
    """
    Create the full sample set

    Args:
        output_dir: Directory to write into. If None, uses a temp directory.

    Returns:
        Paths keyed by "raster", "vector" and "pyramid"

    Examples:
        >>> from geoextract.sample_data import create_sample_data
        >>> paths = create_sample_data()
        >>> sorted(paths)
        ['pyramid', 'raster', 'vector']
    """
    if output_dir is None:
        import tempfile

        output_dir = tempfile.mkdtemp(prefix="geoextract_sample_")

    out_path = Path(output_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    paths = {
        "raster": create_sample_raster(str(out_path / "terrain.tif")),
        "vector": create_sample_vector(str(out_path / "features.gpkg")),
        "pyramid": create_sample_pyramid(str(out_path / "pyramid")),
    }
    logger.info("Created sample data in %s", output_dir)
    return paths
