"""
Tests for the command-line interface
"""

import json

import rasterio

from geoextract.cli import main
from geoextract.grid.tile_grid import WebMercatorGrid


class TestInfoCommand:
    """Test the info command"""

    def test_raster(self, raster_path, capsys):
        """Test info output for a raster dataset"""
        assert main(["info", raster_path]) == 0
        out = capsys.readouterr().out
        assert "Raster layer: (default)" in out
        assert "Size: 1000 x 1000" in out

    def test_vector(self, vector_path, capsys):
        """Test info output lists feature layers"""
        assert main(["info", vector_path]) == 0
        out = capsys.readouterr().out
        assert "Feature layer: lines" in out
        assert "Features: 4" in out

    def test_missing(self, tmp_path, capsys):
        """Test info on a missing file fails"""
        assert main(["info", str(tmp_path / "missing.tif")]) == 1
        assert "Could not open dataset" in capsys.readouterr().out


class TestFeaturesCommand:
    """Test the features command"""

    def test_near(self, vector_path, capsys):
        """Test radius query printed as GeoJSON lines"""
        code = main([
            "features", vector_path, "--layer", "points",
            "--x", "0", "--y", "0", "--radius", "10", "--max", "2",
        ])
        assert code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        names = [json.loads(line)["properties"]["name"] for line in lines]
        assert names == ["origin", "near"]

    def test_negative_max(self, vector_path, capsys):
        """Test that a negative --max is reported, not raised"""
        code = main([
            "features", vector_path, "--layer", "points",
            "--x", "0", "--y", "0", "--radius", "10", "--max", "-1",
        ])
        assert code == 1
        assert "--max" in capsys.readouterr().out

    def test_crop(self, vector_path, capsys):
        """Test line cropping from the command line"""
        code = main([
            "features", vector_path, "--layer", "lines",
            "--x", "0", "--y", "100", "--crop-size", "100",
        ])
        assert code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 4
        assert json.loads(lines[0])["geometry"]["type"] == "LineString"

    def test_radius_requires_position(self, vector_path, capsys):
        """Test that --radius needs --x and --y"""
        assert main(["features", vector_path, "--radius", "10"]) == 1

    def test_unknown_layer(self, vector_path, capsys):
        """Test that an unknown layer reports an invalid handle"""
        assert main(["features", vector_path, "--layer", "rivers"]) == 1
        assert "Invalid handle" in capsys.readouterr().out


class TestImageCommands:
    """Test the image and pyramid commands"""

    def test_image(self, raster_path, tmp_path):
        """Test writing an extracted tile to GeoTIFF"""
        output = str(tmp_path / "tile.tif")
        code = main([
            "image", raster_path, "--x", "0", "--y", "100", "--size", "50",
            "--px", "64", "--interpolation", "bilinear", "-o", output,
        ])
        assert code == 0
        with rasterio.open(output) as src:
            assert (src.width, src.height) == (64, 64)

    def test_image_outside(self, raster_path, tmp_path, capsys):
        """Test that a square outside the raster writes nothing"""
        output = tmp_path / "tile.tif"
        code = main([
            "image", raster_path, "--x", "200", "--y", "200", "--size", "50",
            "-o", str(output),
        ])
        assert code == 1
        assert not output.exists()

    def test_unknown_interpolation(self, raster_path, tmp_path, capsys):
        """Test that an unknown interpolation name is reported, not raised"""
        output = tmp_path / "tile.tif"
        code = main([
            "image", raster_path, "--x", "0", "--y", "100", "--size", "50",
            "--interpolation", "sharpest", "-o", str(output),
        ])
        assert code == 1
        assert "Error" in capsys.readouterr().out
        assert not output.exists()

    def test_non_positive_size(self, raster_path, tmp_path, capsys):
        """Test that a zero pixel size is reported, not raised"""
        code = main([
            "image", raster_path, "--x", "0", "--y", "100", "--size", "50",
            "--px", "0", "-o", str(tmp_path / "tile.tif"),
        ])
        assert code == 1
        assert "Error" in capsys.readouterr().out

    def test_pyramid(self, pyramid_path, tmp_path):
        """Test pyramid extraction with a custom tile size"""
        origin = WebMercatorGrid.ORIGIN_SHIFT_M
        output = str(tmp_path / "world.tif")
        code = main([
            "pyramid", pyramid_path, "tif", "--tile-size", "16",
            "--x", str(-origin), "--y", str(origin), "--size", str(2 * origin),
            "--px", "32", "-o", output,
        ])
        assert code == 0
        with rasterio.open(output) as src:
            assert src.read(1).max() == 2

    def test_no_command(self, capsys):
        """Test that a missing command prints help"""
        assert main([]) == 1
