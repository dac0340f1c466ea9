#!/usr/bin/env python3
"""
Command-line interface for Blarf - static blog generator.
"""

import sys
import argparse
from typing import List, Optional

from . import __version__
from .core import SiteAssembler, SiteConfig, setup_logging
from .errors import BlarfError
from .settings import BlarfSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='blarf', description='Blarf - Static Blog Generator')
    parser.add_argument('-a', '--articles', type=str,
                        help='Directory holding one markdown file per article')
    parser.add_argument('-s', '--static', type=str,
                        help='Directory of static assets copied to the site root')
    parser.add_argument('-d', '--dest', dest='destination', type=str,
                        help='Destination directory (replaced on every build)')
    parser.add_argument('-e', '--email', type=str,
                        help='Contact email address for the footer link')
    parser.add_argument('-c', '--css', type=str,
                        help='Stylesheet to publish instead of the bundled one')
    parser.add_argument('--site-title', type=str,
                        help='Page title used for articles without a heading')
    parser.add_argument('--staging', type=str,
                        help='Staging directory the site is built in before publishing')
    parser.add_argument('--config', type=str,
                        help='Configuration file (defaults to blarf.yml, blarf.yaml or blarf.json)')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level')
    parser.add_argument('--log-file', type=str,
                        help='Also write a debug log to this file')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and exit')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    settings_loader = BlarfSettings()

    try:
        if args.init:
            config_path = settings_loader.create_sample_config(args.init)
            print(f"Created sample configuration file: {config_path}")
            return 0

        settings_loader.load_settings(args.config)

        # Convert argparse Namespace to dict, excluding None values for proper merging
        args_dict = {k: v for k, v in vars(args).items() if v is not None}
        final_settings = settings_loader.merge_with_args(args_dict)

        setup_logging(final_settings['log_level'], final_settings['log_file'])

        config = SiteConfig(
            articles_dir=final_settings['articles'],
            destination_dir=final_settings['destination'],
            static_dir=final_settings['static'],
            email=final_settings['email'],
            css_path=final_settings['css'],
            site_title=final_settings['site_title'],
            staging_dir=final_settings['staging'],
        )
        report = SiteAssembler(config).build()
    except BlarfError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (IOError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"blarfed {report.destination}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
