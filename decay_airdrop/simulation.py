"""
Airdrop Claim Simulation Tool

Runs the decay schedule from launch until a claim would pay nothing and writes
one CSV row per claim, so the distribution curve can be reviewed offline.
"""
import csv
import argparse
from typing import Iterator, Iterable, Optional

from decay_airdrop.airdrop_state import AirdropState, ClaimRecord
from decay_airdrop.config import Config, build_state
from decay_airdrop.engine import compute_claim, CLAIM_REDUCTION, CLAIM_DIVISOR

CSV_HEADER = ['claim_number', 'claim_ratio', 'claim_amount', 'remaining_supply']


def simulate_claims(state: Optional[AirdropState] = None,
                    limit: Optional[int] = None,
                    reduction: int = CLAIM_REDUCTION,
                    divisor: int = CLAIM_DIVISOR) -> Iterator[ClaimRecord]:
    """
    Yield every claim the schedule would pay, in order.

    Stops when the supply is gone or the next claim truncates to zero; a
    zero-amount claim is never yielded. The given state is not modified.

    Args:
        state: Starting state (launch state when omitted)
        limit: Stop after this many records
    """
    if state is None:
        state = AirdropState()

    supply = state.supply
    ratio = state.ratio
    claim_number = state.claim_count

    while supply > 0 and (limit is None or claim_number - state.claim_count < limit):
        amount, new_supply, new_ratio = compute_claim(supply, ratio, reduction, divisor)
        if amount <= 0:
            break
        claim_number += 1
        yield ClaimRecord(
            claim_number=claim_number,
            claim_ratio=ratio,
            claim_amount=amount,
            remaining_supply=new_supply,
        )
        supply, ratio = new_supply, new_ratio


def write_csv(records: Iterable[ClaimRecord], path: str) -> int:
    """Write records to `path` with a header row. Returns the number of rows."""
    count = 0
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for record in records:
            writer.writerow(record.to_row())
            count += 1
    return count


def run_simulation(config: Config, output: Optional[str] = None,
                   limit: Optional[int] = None) -> int:
    """Simulate the configured airdrop and write the report."""
    airdrop = config.airdrop
    output = output or config.simulation.output
    if limit is None:
        limit = config.simulation.limit

    records = simulate_claims(
        build_state(airdrop),
        limit=limit,
        reduction=airdrop.claim_reduction,
        divisor=airdrop.claim_divisor,
    )
    count = write_csv(records, output)
    print(f"Simulated {count} claims above 0 from a supply of {airdrop.initial_supply}")
    print(f"Report written to: {output}")
    return count


def main(argv=None):
    parser = argparse.ArgumentParser(description="Airdrop Claim Simulation Tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parser_run = subparsers.add_parser("run", help="Simulate claims and write a CSV report")
    parser_run.add_argument("--config", type=str, default=None, help="Path to config JSON file")
    parser_run.add_argument("--output", type=str, default=None, help="Output CSV path")
    parser_run.add_argument("--limit", type=int, default=None, help="Maximum number of claims")

    parser_sample = subparsers.add_parser("sample-config", help="Write the default configuration")
    parser_sample.add_argument("--output", type=str, default="airdrop.json", help="Output file path")

    args = parser.parse_args(argv)

    if args.command == "run":
        config = Config.from_file(args.config) if args.config else Config.default()
        run_simulation(config, output=args.output, limit=args.limit)
    elif args.command == "sample-config":
        Config.default().to_file(args.output)
        print(f"Generated sample configuration at: {args.output}")


if __name__ == '__main__':
    main()
