"""
Critical Chain analysis
=======================

Runs the bundled example project through the Critical Chain engine.
"""

import argparse
import json
import logging
import sys

from .examples.simple_project import create_sample_project


def main(argv=None):
    parser = argparse.ArgumentParser(description="Critical Chain Project Management")
    parser.add_argument(
        "--example", action="store_true", help="Run the example project"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output filename for the Gantt chart",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the analysis as JSON"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.example:
        print("Running example project...")
        result = create_sample_project(args.output)
        if args.json:
            print(json.dumps(result.analysis.to_dict(), indent=2))
        if args.output:
            print(f"Visualization saved to {args.output}")
        return 0
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
