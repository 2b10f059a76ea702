"""crddocs CLI - generate markdown pages documenting composite resource CRDs.

This module provides the command line entrypoint. It reads the
configuration, clones the configured repositories and writes one page per
documented CRD.
"""

import argparse
import logging
import sys

from crddocs.core.errors import AcquisitionError, ConfigError
from crddocs.core.generator import GeneratorSettings, generate_crd_docs

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = GeneratorSettings()
    parser = argparse.ArgumentParser(
        prog="crd-docs-generator",
        description="Generate markdown files that document composite resource CRDs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate pages with the default folders
  crd-docs-generator --config ./config.yaml

  # Custom CRD and example folders inside the cloned repositories
  crd-docs-generator --crdFolder deploy/crds --crFolder docs/examples

  # Write pages elsewhere, verbose
  crd-docs-generator --outputFolderPath ./site/content/crds -v
"""
    )
    parser.add_argument(
        "--config",
        default=defaults.config_file_path,
        help="Path to the configuration file.",
    )
    parser.add_argument(
        "--crFolder",
        default=defaults.cr_folder,
        help="Path to example CRs in YAML format.",
    )
    parser.add_argument(
        "--crdFolder",
        default=defaults.crd_folder,
        help="Path to CRDs in YAML format.",
    )
    parser.add_argument(
        "--outputFolderPath",
        default=defaults.output_folder_path,
        help="Path to the output folder",
    )
    parser.add_argument(
        "--repoFolder",
        default=defaults.repo_folder,
        help="Path to the cloned repository",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    return parser


def main(argv=None):
    """Main CLI entrypoint for crddocs."""
    args = build_parser().parse_args(argv)

    # Setup logging
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    settings = GeneratorSettings(
        config_file_path=args.config,
        cr_folder=args.crFolder,
        crd_folder=args.crdFolder,
        output_folder_path=args.outputFolderPath,
        repo_folder=args.repoFolder,
    )

    try:
        pages = generate_crd_docs(settings)
    except (AcquisitionError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.exception("Generation failed")
        return 1

    print(f"Wrote {len(pages)} pages to {settings.output_folder_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
