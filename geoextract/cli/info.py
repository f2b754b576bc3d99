"""
Info CLI command

Shows dataset validity, raster georeference and vector layers.
"""

import argparse

from geoextract.core.dataset import Dataset


def run_info(args: argparse.Namespace) -> int:
    """Run the info command"""
    with Dataset(args.path) as dataset:
        if not dataset.is_valid():
            print(f"Error: Could not open dataset: {args.path}")
            return 1

        print(f"Dataset: {dataset.path}")
        print()

        for name in dataset.raster_layer_names():
            _show_raster(dataset, name)

        for name in dataset.feature_layer_names():
            layer = dataset.get_feature_layer(name)
            print(f"Feature layer: {name}")
            print(f"  Features: {layer.feature_count():,}")
            print(f"  CRS: {layer.crs}")
            print()

    return 0


def _show_raster(dataset: Dataset, name: str) -> None:
    layer = dataset.get_raster_layer(name)
    print(f"Raster layer: {name or '(default)'}")
    if not layer.is_valid():
        print("  Status: invalid or unsupported georeference")
        print()
        return

    meta = layer.get_metadata()
    res_x, res_y = layer.get_resolution()
    print(f"  Size: {meta['width']} x {meta['height']}")
    print(f"  Bands: {meta['count']} ({meta['dtype']})")
    print(f"  CRS: {meta['crs']}")
    print(f"  Bounds: {tuple(meta['bounds'])}")
    print(f"  Resolution: {res_x:g} x {res_y:g}")
    print(f"  Nodata: {meta['nodata']}")
    print()
