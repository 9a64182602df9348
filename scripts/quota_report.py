#!/usr/bin/env python
"""Standalone quota report script."""
import sys
import argparse
from quotareport.config.parser import ConfigParser
from quotareport.quota.collector import QuotaCollector
from quotareport.report.renderer import critical_summaries

def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate an HTML report of Azure quota usage across subscriptions")
    parser.add_argument("--config", "-c", default=None, help="Path to report YAML configuration")
    parser.add_argument("--location", "-l", help="Azure region to query")
    parser.add_argument("--output", "-o", help="Output HTML file")
    parser.add_argument("--debug", action="store_true", help="Print verbose debug information")
    parser.add_argument("--fail-on-critical", action="store_true", help="Exit with code 2 when any quota is at or above 80%% usage")
    args = parser.parse_args()

    try:
        config = ConfigParser.load(args.config)
        if args.location:
            config.location = args.location
        if args.output:
            config.output = args.output

        collector = QuotaCollector(config, debug=args.debug)
        result, summaries = collector.generate_report()

        for failure in result.failures:
            print(f"Warning: {failure}", file=sys.stderr)

        critical = critical_summaries(summaries)
        if critical and args.fail_on_critical:
            print(f"{len(critical)} quota(s) at or above critical usage", file=sys.stderr)
            return 2

        return 0
    except Exception as e:
        print(f"Error generating quota report: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
