"""Command-line interface for inspecting and exporting HDRE files."""

import argparse
import json
import logging
import os
import sys

import numpy as np

from .config import CubeBrewConfig
from .core import setup_logging
from .registry import AssetRegistry

logger = logging.getLogger("cubebrew")


def _format_summary(info: dict) -> str:
    lines = [
        f"{info['path']}",
        f"  version:        {info['version']}",
        f"  size:           {info['width']}x{info['height']} "
        f"x {info['num_channels']} channels ({info['bits_per_channel']} bits)",
        f"  max luminance:  {info['max_luminance']:.4f}",
        f"  SH coeffs:      "
        + (str(info['num_sh_coeffs']) if info['includes_sh'] else "none"),
        f"  levels:         "
        + ", ".join(f"{lvl['width']}" for lvl in info["levels"]),
    ]
    return "\n".join(lines)


def export_faces(asset, dest_dir: str) -> list:
    """Write every level's faces as ``level{i}_face{j}.npy`` under ``dest_dir``."""
    os.makedirs(dest_dir, exist_ok=True)
    written = []
    for lvl in asset.levels:
        for j in range(len(lvl.faces)):
            out_path = os.path.join(dest_dir, f"level{lvl.index}_face{j}.npy")
            np.save(out_path, asset.face_image(lvl.index, j))
            written.append(out_path)
    if asset.has_sh:
        out_path = os.path.join(dest_dir, "sh_coeffs.npy")
        np.save(out_path, asset.sh_coeffs)
        written.append(out_path)
    logger.debug("Exported %d arrays to %s", len(written), dest_dir)
    return written


def main(argv=None):
    """Parse CLI arguments, decode the given files, and report results."""
    parser = argparse.ArgumentParser(
        prog="CubeBrew",
        description="Decode HDRE prefiltered cubemap files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  CubeBrew env.hdre
  CubeBrew a.hdre b.hdre --json
  CubeBrew env.hdre --export ./env_faces
  CubeBrew --generate-config
        """
    )
    parser.add_argument("files", nargs="*", help="HDRE files to decode")
    parser.add_argument("--config", "-c", help="Path to config YAML")
    parser.add_argument("--json", action="store_true",
                        help="Print summaries as JSON")
    parser.add_argument("--export", "-e", metavar="DIR",
                        help="Write faces of each file as .npy arrays under DIR")
    parser.add_argument("--levels", type=int,
                        help="Number of mip levels stored in the files")
    parser.add_argument("--workers", type=int, help="Max parallel decodes")
    parser.add_argument("--generate-config", action="store_true",
                        help="Generate default config.yaml")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    args = parser.parse_args(argv)

    if args.generate_config:
        config = CubeBrewConfig()
        dest = args.config or "config.yaml"
        if os.path.isdir(dest):
            dest = os.path.join(dest, "config.yaml")
        config.to_yaml(dest)
        logger.info("Generated default %s", dest)
        print(f"Generated default {dest}")
        return

    # Early warnings from from_yaml() go to stderr before full setup.
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.config:
        if not os.path.exists(args.config):
            logger.error("Config file not found: %s", args.config)
            print(f"Error: Config file not found: {args.config}")
            sys.exit(1)
        try:
            config = CubeBrewConfig.from_yaml(args.config)
        except ValueError as e:
            logger.error("Invalid config file '%s': %s", args.config, e)
            print(f"Error: Invalid config: {e}")
            sys.exit(1)
    else:
        config = CubeBrewConfig()

    if args.levels is not None:
        config.decoder.num_levels = args.levels
    if args.workers is not None:
        config.registry.max_workers = args.workers
    if args.log_level:
        config.log_level = args.log_level
    if args.json:
        config.registry.show_progress = False

    try:
        config.validate()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    if not args.files:
        parser.print_usage()
        print("Error: no input files given")
        sys.exit(1)

    setup_logging(config.log_level, config.log_file or None)

    registry = AssetRegistry(config)
    failures = registry.preload(args.files)

    summaries = []
    try:
        for path in args.files:
            if path in failures:
                continue
            asset = registry.get(path)
            summaries.append(asset.describe())
            if args.export:
                stem = os.path.splitext(os.path.basename(path))[0]
                dest = os.path.join(args.export, stem)
                written = export_faces(asset, dest)
                logger.info("Exported %d arrays for %s to %s", len(written), path, dest)
    finally:
        registry.clear()

    if args.json:
        print(json.dumps({
            "assets": summaries,
            "failures": {p: str(e) for p, e in failures.items()},
        }, indent=2))
    else:
        for info in summaries:
            print(_format_summary(info))
        for path, exc in failures.items():
            print(f"Error: {exc}")

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
