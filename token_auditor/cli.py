#!/usr/bin/env python3
"""
Token Auditor CLI

Command-line interface for heuristic security triage of token contracts.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .auditor import AuditReport, TokenAuditor, create_auditor, format_finding
from .detectors import all_detectors, context_rules
from .explorer import ExplorerError, SourceNotFoundError, create_client
from .sources import MalformedSourceError


def print_banner():
    """Print CLI banner."""
    banner = """
╔═══════════════════════════════════════════════════════════════════════════════╗
║                                                                               ║
║   TOKEN AUDITOR - heuristic security triage for ERC-20 token contracts        ║
║   🔍 rug-pull | honeypot | minting | reentrancy | proxy | bytecode checks     ║
║                                                                               ║
╚═══════════════════════════════════════════════════════════════════════════════╝
    """
    print(banner)


def setup_logging(verbose: bool = False, quiet: bool = False):
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def print_report(report: AuditReport, args):
    print(report.format_summary())

    if report.findings:
        print("\n📋 DETAILED FINDINGS:")
        for finding in report.findings:
            print(format_finding(finding))
    else:
        print("\n✅ No potential vulnerabilities detected!")
        print("   Note: This doesn't guarantee the code is secure. Manual review is still recommended.")

    if args.output_md:
        md_path = Path(args.output_md)
        md_path.write_text(report.to_markdown())
        print(f"\n📄 Markdown report saved to: {md_path}")

    if args.output_json:
        json_path = Path(args.output_json)
        json_path.write_text(report.to_json())
        print(f"\n📄 JSON report saved to: {json_path}")


def exit_code_for(report: AuditReport) -> int:
    """2 for any Critical finding, 1 for any High, else 0."""
    if report.critical_count > 0:
        return 2
    elif report.high_count > 0:
        return 1
    return 0


def cmd_audit(args, auditor: TokenAuditor):
    """Handle audit command (local source file)."""
    path = Path(args.target)

    if not path.exists():
        print(f"❌ Error: Target not found: {args.target}")
        return 1

    if path.suffix != '.sol':
        print(f"⚠️  Warning: {args.target} may not be a Solidity file")

    bytecode = args.bytecode or ""
    if args.bytecode_file:
        bytecode = Path(args.bytecode_file).read_text().strip()

    print(f"\n🔍 Analyzing: {args.target}")
    print("-" * 60)

    report = auditor.audit_file(str(path), bytecode=bytecode, contract_address=args.address or "")
    print_report(report, args)
    return exit_code_for(report)


def cmd_fetch(args, auditor: TokenAuditor):
    """Handle fetch command (deployed contract via explorer)."""
    print(f"\n🔍 Fetching verified source for: {args.address}")
    print("-" * 60)

    report = auditor.audit_address(args.address, include_bytecode=not args.no_bytecode)
    print_report(report, args)
    return exit_code_for(report)


def cmd_detectors(args, auditor: Optional[TokenAuditor]):
    """Handle detectors command: list registered checks."""
    rule_ids = {r.detector_id for r in context_rules()}
    detectors = all_detectors()

    print(f"\n📊 {len(detectors)} detectors registered")
    current_family = None
    for d in detectors:
        if d.family != current_family:
            current_family = d.family
            print(f"\n📁 {current_family}")
        kind = "rule" if d.detector_id in rule_ids else "check"
        print(f"   - {d.detector_id} [{kind}]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='token-auditor',
        description='Heuristic security triage for ERC-20 token contracts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Audit a local source file
  token-auditor audit contracts/Token.sol

  # Include deployed bytecode and export reports
  token-auditor audit Token.sol --bytecode-file Token.bin -o report.md -j report.json

  # Audit a verified contract by address
  token-auditor fetch 0x1234...abcd

  # List detectors
  token-auditor detectors

Environment Variables:
  ETHERSCAN_API_KEY          Explorer API key (fetch command)
  ETHERSCAN_API_URL          Explorer API root (default: Etherscan mainnet)
  ETHEREUM_RPC_URL           JSON-RPC node for bytecode (fetch command)
  TOKEN_AUDITOR_MAX_RESULTS  Report cap (default: 10)
  TOKEN_AUDITOR_DISABLED     Comma separated detector ids or families to skip
        """
    )

    parser.add_argument('--max-results', '-n', type=int, default=None,
                        help='Maximum findings in the report (default: 10)')
    parser.add_argument('--serial', action='store_true',
                        help='Run detectors one at a time instead of on a thread pool')
    parser.add_argument('--workers', type=int, default=None,
                        help='Thread-pool size for parallel detector runs')
    parser.add_argument('--disable', action='append', default=None, metavar='ID',
                        help='Skip a detector id or family (repeatable)')
    parser.add_argument('--api-key', '-k',
                        help='Explorer API key (or set ETHERSCAN_API_KEY env var)')
    parser.add_argument('--rpc-url',
                        help='JSON-RPC node URL (or set ETHEREUM_RPC_URL env var)')
    parser.add_argument('--no-cache', action='store_true',
                        help='Disable explorer result caching')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress banner and verbose output')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging, including per-detector results')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    audit_parser = subparsers.add_parser('audit', help='Audit a local Solidity file')
    audit_parser.add_argument('target', help='Solidity file to audit')
    audit_parser.add_argument('--bytecode', help='Deployed bytecode hex string (0x...)')
    audit_parser.add_argument('--bytecode-file', metavar='FILE', help='File containing deployed bytecode')
    audit_parser.add_argument('--address', help='Contract address (excluded from hardcoded-address checks)')

    fetch_parser = subparsers.add_parser('fetch', help='Audit a verified contract by address')
    fetch_parser.add_argument('address', help='Contract address')
    fetch_parser.add_argument('--no-bytecode', action='store_true',
                              help="Don't fetch deployed bytecode")

    for sub in (audit_parser, fetch_parser):
        sub.add_argument('--output-md', '-o', metavar='FILE', help='Export markdown report')
        sub.add_argument('--output-json', '-j', metavar='FILE', help='Export JSON report')

    subparsers.add_parser('detectors', help='List registered detectors')

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(verbose=args.verbose, quiet=args.quiet)
    if not args.quiet:
        print_banner()

    try:
        client = None
        if args.command == 'fetch':
            client = create_client(api_key=args.api_key, rpc_url=args.rpc_url, enable_cache=not args.no_cache)

        auditor = create_auditor(
            client=client,
            max_results=args.max_results,
            parallel=False if args.serial else None,
            disabled_detectors=args.disable,
            max_workers=args.workers,
        )

        if args.command == 'audit':
            exit_code = cmd_audit(args, auditor)
        elif args.command == 'fetch':
            exit_code = cmd_fetch(args, auditor)
        elif args.command == 'detectors':
            exit_code = cmd_detectors(args, auditor)
        else:
            parser.print_help()
            exit_code = 0

        sys.exit(exit_code)

    except KeyboardInterrupt:
        print("\n\n👋 Interrupted. Goodbye!")
        sys.exit(130)
    except MalformedSourceError as e:
        print(f"\n❌ Invalid Solidity source: {e}")
        sys.exit(1)
    except SourceNotFoundError as e:
        print(f"\n❌ {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"\n❌ Configuration Error: {e}")
        sys.exit(1)
    except ExplorerError as e:
        print(f"\n❌ Network Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
