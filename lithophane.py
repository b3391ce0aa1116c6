import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from data_types import DegenerateInputError, LithophaneConfig, LithophaneError
from export import open_stl_sink
from heightfield import HeightField, build_height_field
from imaging import grayscale_grid, image_to_rgb_samples, load_image, resample_image, smooth_image
from meshing import MeshBuilder
from plotting import plot_height_field, plot_mesh, plot_mesh_with_highlighted_edges
from validation import find_boundary_edges, is_closed_manifold, summarize_mesh

logger = logging.getLogger("lithophane")


def setup_logging(level: int = logging.INFO) -> None:
    """Configure console logging for the converter and its packages."""
    root = logging.getLogger()
    root.setLevel(level)
    # Replace a handler left by an earlier call instead of stacking duplicates
    for handler in list(root.handlers):
        if getattr(handler, "is_lithophane_console", False):
            root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    ))
    console_handler.is_lithophane_console = True
    root.addHandler(console_handler)


def height_field_from_image(image_path, config: LithophaneConfig) -> HeightField:
    """Decode, resample and optionally smooth the image, then map it to thicknesses."""
    image = load_image(image_path)
    pixel_width, pixel_height = config.pixel_grid_size(image.width, image.height)
    logger.info("Sampling %dx%d image onto a %dx%d grid (%.3f mm step)",
                image.width, image.height, pixel_width, pixel_height, config.step_size_mm)

    resampled = smooth_image(resample_image(image, pixel_width, pixel_height), config.blur_radius)
    grayscale = grayscale_grid(image_to_rgb_samples(resampled), mirror_x=config.mirror_x, mirror_y=config.mirror_y)
    return build_height_field(grayscale, config.min_thickness_mm, config.max_thickness_mm, negate=config.negative)


def default_output_path(image_path) -> Path:
    """The image's file name with an .stl extension, in the current directory."""
    return Path(Path(image_path).stem + ".stl")


def write_stl(builder: MeshBuilder, output_path, binary: bool = True, name: str = "lithophane",
              progress: bool = False) -> int:
    """Stream the builder's triangles into a new STL file and return how many were written."""
    with open_stl_sink(output_path, binary=binary, name=name) as sink:
        sink.emit_triangles(builder.triangles(), total=builder.expected_triangle_count(), progress=progress)
    return sink.triangle_count


def check_mesh(builder: MeshBuilder, show_plots: bool = False) -> None:
    """Build the full mesh and refuse to continue unless it is closed."""
    mesh = builder.build_mesh()
    closed = is_closed_manifold(mesh)
    if show_plots:
        if closed:
            plot_mesh(mesh, title="Lithophane mesh")
        else:
            plot_mesh_with_highlighted_edges(mesh, find_boundary_edges(mesh), title="Open edges")
        plt.show()
    if not closed:
        summary = summarize_mesh(mesh)
        raise DegenerateInputError(
            f"Generated mesh is not closed ({summary['boundary_loops']} boundary loops); nothing written"
        )
    logger.info("Mesh check passed: %d faces, %d vertices", len(mesh.faces), len(mesh.vertices))


def convert_image_to_stl(image_path, output_path=None, config: Optional[LithophaneConfig] = None,
                         check: bool = False, progress: bool = False, show_plots: bool = False) -> Path:
    """
    Convert an image into a lithophane STL file.

    Returns the path that was written. Raises a LithophaneError subclass on any
    failure, in which case no STL file is left behind by the writing stage.
    """
    config = config or LithophaneConfig()
    output_path = Path(output_path) if output_path is not None else default_output_path(image_path)

    height_field = height_field_from_image(image_path, config)
    if show_plots:
        plot_height_field(height_field, step=config.step_size_mm, title=f"Thickness map of {Path(image_path).name}")
        plt.show()

    builder = MeshBuilder.from_config(height_field, config, progress=progress)
    if check:
        check_mesh(builder, show_plots=show_plots)

    count = write_stl(builder, output_path, binary=config.binary, name=output_path.stem, progress=progress)
    logger.info("Saved %s STL with %d triangles to %s", "binary" if config.binary else "ASCII", count, output_path)
    return output_path


def parse_args(argv=None):
    defaults = LithophaneConfig()
    parser = argparse.ArgumentParser(description='Convert an image into a lithophane STL file.')
    parser.add_argument('image', type=str, help='Path to the image to convert')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Path of the STL file to write (default: image name with .stl in the current directory)')
    parser.add_argument('--ascii', action='store_true', help='Write ASCII STL instead of binary')
    parser.add_argument('--negative', action='store_true', help='Make bright pixels thick instead of dark ones')
    parser.add_argument('--mirror-x', action='store_true', help='Mirror the image horizontally')
    parser.add_argument('--mirror-y', action='store_true', help='Mirror the image vertically')
    parser.add_argument('--no-border', action='store_true', help='Close the sides with plain walls instead of a frame')
    parser.add_argument('--fan-back', action='store_true', help='Tessellate the flat back with a single fan')
    parser.add_argument('--width', type=float, default=defaults.desired_width_mm, help='Width of the print in mm')
    parser.add_argument('--step', type=float, default=defaults.step_size_mm, help='Distance between samples in mm')
    parser.add_argument('--min-thickness', type=float, default=defaults.min_thickness_mm,
                        help='Thickness of the brightest pixels in mm')
    parser.add_argument('--max-thickness', type=float, default=defaults.max_thickness_mm,
                        help='Thickness of the darkest pixels in mm')
    parser.add_argument('--border-thickness', type=float, default=defaults.border_thickness_mm,
                        help='Height of the frame in mm')
    parser.add_argument('--border-width', type=float, default=defaults.border_width_mm,
                        help='Width of the frame in mm')
    parser.add_argument('--blur-radius', type=float, default=defaults.blur_radius,
                        help='Gaussian smoothing radius in samples (0 disables smoothing)')
    parser.add_argument('--check', action='store_true', help='Verify the mesh is watertight before writing it')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output with visualizations')
    return parser.parse_args(argv)


def config_from_args(args) -> LithophaneConfig:
    return LithophaneConfig(
        binary=not args.ascii,
        negative=args.negative,
        mirror_x=args.mirror_x,
        mirror_y=args.mirror_y,
        add_border=not args.no_border,
        fan_back=args.fan_back,
        desired_width_mm=args.width,
        min_thickness_mm=args.min_thickness,
        max_thickness_mm=args.max_thickness,
        border_thickness_mm=args.border_thickness,
        border_width_mm=args.border_width,
        step_size_mm=args.step,
        blur_radius=args.blur_radius,
    )


def main(argv=None):
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = config_from_args(args)
        convert_image_to_stl(args.image, args.output, config, check=args.check, progress=True,
                             show_plots=args.verbose)
    except LithophaneError as e:
        print(f"Error: {e}")
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
