"""
GeoExtract CLI Entry Points

Provides command-line interface for:
- info: Show dataset contents
- features: Query vector features
- image: Extract a raster tile to GeoTIFF
- pyramid: Extract a raster tile from a tile pyramid
"""

import argparse
import logging
import sys


def _add_square_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--x", type=float, required=True, help="Top-left x in dataset units")
    parser.add_argument("--y", type=float, required=True, help="Top-left y in dataset units")
    parser.add_argument("--size", type=float, required=True, help="Square side in dataset units")
    parser.add_argument("--px", type=int, default=256, help="Output size in pixels (default: 256)")
    parser.add_argument(
        "--interpolation",
        default="nearest",
        help="nearest, bilinear, cubic, trilinear, lanczos or 0-4 (default: nearest)",
    )
    parser.add_argument("--output", "-o", required=True, help="Output GeoTIFF path")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="GeoExtract - Raster and vector extraction for spatial queries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  geoextract info city.gpkg                                   Show dataset contents
  geoextract features city.gpkg --layer roads --x 10 --y 20 --radius 50
  geoextract features city.gpkg --layer roads --x 0 --y 100 --crop-size 100
  geoextract image dem.tif --x 0 --y 100 --size 50 --px 256 -o tile.tif
  geoextract pyramid /data/ortho tif --x 0 --y 0 --size 2000 -o tile.tif
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Info command
    info_parser = subparsers.add_parser("info", help="Show dataset contents")
    info_parser.add_argument("path", help="Dataset path")

    # Features command
    features_parser = subparsers.add_parser("features", help="Query vector features")
    features_parser.add_argument("path", help="Dataset path")
    features_parser.add_argument("--layer", default="", help="Layer name (default: first layer)")
    features_parser.add_argument("--x", type=float, help="Query x")
    features_parser.add_argument("--y", type=float, help="Query y")
    features_parser.add_argument("--radius", type=float, help="Search radius around (x, y)")
    features_parser.add_argument(
        "--crop-size", type=float, help="Clip lines to the square of this size at top-left (x, y)"
    )
    features_parser.add_argument("--max", type=int, default=None, help="Maximum number of features")

    # Image command
    image_parser = subparsers.add_parser("image", help="Extract a raster tile")
    image_parser.add_argument("path", help="Dataset path")
    image_parser.add_argument("--layer", default="", help="Raster subdataset name")
    _add_square_arguments(image_parser)

    # Pyramid command
    pyramid_parser = subparsers.add_parser("pyramid", help="Extract a raster tile from a pyramid")
    pyramid_parser.add_argument("base", help="Pyramid root ({base}/{z}/{x}/{y}.{ending})")
    pyramid_parser.add_argument("ending", help="Tile file ending (e.g. tif)")
    pyramid_parser.add_argument(
        "--tile-size", type=int, default=None, help="Pyramid tile size in pixels"
    )
    _add_square_arguments(pyramid_parser)

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(message)s" if not args.verbose else "%(levelname)s: %(message)s"
    )

    if args.command == "info":
        from geoextract.cli.info import run_info

        return run_info(args)
    elif args.command == "features":
        from geoextract.cli.extract import run_features

        return run_features(args)
    elif args.command == "image":
        from geoextract.cli.extract import run_image

        return run_image(args)
    elif args.command == "pyramid":
        from geoextract.cli.extract import run_pyramid

        return run_pyramid(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
