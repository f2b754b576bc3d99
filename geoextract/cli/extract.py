"""
Extraction CLI commands

Vector feature queries (printed as GeoJSON lines) and raster tile
extraction (written as GeoTIFF).
"""

import argparse
import json
import logging

from geoextract.core.config import ExtractionConfig, get_config
from geoextract.core.dataset import Dataset
from geoextract.core.exceptions import ConfigurationError
from geoextract.core.result import QueryResult
from geoextract.core.tile import Interpolation
from geoextract.io.pyramid import PyramidRasterLayer
from geoextract.query import executor

logger = logging.getLogger(__name__)


def run_features(args: argparse.Namespace) -> int:
    """Run the features command"""
    if args.max is not None and args.max < 0:
        print(f"Error: --max must be >= 0, got {args.max}")
        return 1

    with Dataset(args.path) as dataset:
        layer = dataset.get_feature_layer(args.layer)

        try:
            if args.crop_size is not None:
                if args.x is None or args.y is None:
                    print("Error: --crop-size requires --x and --y")
                    return 1
                result = executor.query_crop_lines(layer, args.x, args.y, args.crop_size, args.max)
            elif args.radius is not None:
                if args.x is None or args.y is None:
                    print("Error: --radius requires --x and --y")
                    return 1
                result = executor.query_features_near(layer, args.x, args.y, args.radius, args.max)
            else:
                result = executor.query_all_features(layer)
                if result.ok and args.max is not None:
                    result = QueryResult.of_features(result.value[: args.max])
        except ValueError as e:
            print(f"Error: {e}")
            return 1

        if not result.ok:
            print(f"Error: {result.message}")
            return 1

        for feature in result.value:
            print(json.dumps(feature.to_geojson(), default=str))

    logger.info("%d feature(s)", len(result.value))
    return 0


def _write_tile(result: QueryResult, output: str) -> int:
    if not result.ok:
        print(f"Error: {result.message}")
        return 1
    tile = result.value
    tile.to_geotiff(output)
    print(f"Wrote {tile.width}x{tile.height} tile ({tile.band_count} band(s)) to {output}")
    return 0


def run_image(args: argparse.Namespace) -> int:
    """Run the image command"""
    try:
        interpolation = Interpolation.parse(args.interpolation)
        with Dataset(args.path) as dataset:
            layer = dataset.get_raster_layer(args.layer)
            result = executor.query_image(layer, args.x, args.y, args.size, args.px, interpolation)
            return _write_tile(result, args.output)
    except (ValueError, ConfigurationError) as e:
        print(f"Error: {e}")
        return 1


def run_pyramid(args: argparse.Namespace) -> int:
    """Run the pyramid command"""
    try:
        interpolation = Interpolation.parse(args.interpolation)
        config = get_config()
        if args.tile_size is not None:
            config = ExtractionConfig.from_dict(
                {**config.to_dict(), "pyramid_tile_size": args.tile_size}
            )

        pyramid = PyramidRasterLayer(args.base, args.ending, config)
        result = executor.query_image(pyramid, args.x, args.y, args.size, args.px, interpolation)
        return _write_tile(result, args.output)
    except (ValueError, ConfigurationError) as e:
        print(f"Error: {e}")
        return 1
