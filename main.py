"""
Entry point for the WordPress to Contentful migration tool.
"""

import argparse
import sys

from wp_contentful.migration_tool import ContentfulMigrationTool
from wp_contentful.utils import MigrationError, get_logger, setup_logging, validate_config
from wp_contentful.utils.config import CONFIG_FILE, normalize_limit
from wp_contentful.utils.pre_flight_checks import run_contentful_pre_flight_checks

logger = get_logger("main")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Migrate WordPress posts into Contentful.")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file.")
    parser.add_argument("--limit", type=int, default=None, help="Only migrate the first N posts (0 = all).")
    parser.add_argument("--dry-run", action="store_true", help="Fetch and map posts without writing to Contentful.")
    parser.add_argument("--skip-checks", action="store_true", help="Skip the Contentful pre-flight checks.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Main function to run the WordPress to Contentful migration tool.
    """
    args = parse_args(argv)
    setup_logging()

    try:
        tool = ContentfulMigrationTool(config_file=args.config)
        if args.limit is not None:
            tool.config["migration"]["limit"] = normalize_limit(args.limit)
        if args.dry_run:
            tool.config["migration"]["dry_run"] = True

        tool.log_message("Starting WordPress to Contentful migration.")
        validate_config(tool.config)
        if not (args.skip_checks or tool.config["migration"]["dry_run"]):
            run_contentful_pre_flight_checks(tool.config)
        tool.run()
    except MigrationError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
