#!/usr/bin/env python3
"""Supply Reconciliation Script.

Checks that the sum of all account balances equals the fixed total supply
and reports the largest holders and the tax collected so far.

Usage:
    python scripts/reconcile.py [--top 10] [--json]

Options:
    --top   Number of largest holders to list (default: 10)
    --json  Print the report as JSON
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

from penguin.ledger.database import close_db, get_db, init_db
from penguin.ledger.repository import LedgerRepository

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

PAGE_SIZE = 500


async def build_report(top: int) -> dict:
    """Collect supply, balances and tax totals from the ledger."""
    async with get_db() as session:
        repo = LedgerRepository(session)
        config = await repo.get_config()

        accounts = []
        offset = 0
        while True:
            page = await repo.list_accounts(limit=PAGE_SIZE, offset=offset)
            accounts.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        total = sum(account.balance for account in accounts)
        holders = sorted(accounts, key=lambda a: a.balance, reverse=True)[:top]

        manager_balance = 0
        if config.liquidity_manager:
            manager_balance = await repo.balance_of(config.liquidity_manager)

        return {
            "symbol": config.symbol,
            "total_supply": str(config.total_supply),
            "sum_of_balances": str(total),
            "discrepancy": str(total - config.total_supply),
            "conserved": total == config.total_supply,
            "accounts": len(accounts),
            "transfers": await repo.get_transfer_count(),
            "liquidity_manager": config.liquidity_manager,
            "liquidity_manager_balance": str(manager_balance),
            "top_holders": [
                {
                    "address": a.address,
                    "balance": str(a.balance),
                    "fee_exempt": a.is_fee_exempt,
                }
                for a in holders
            ],
        }


def print_report(report: dict) -> None:
    print("\n" + "=" * 60)
    print(f"  {report['symbol']} SUPPLY RECONCILIATION")
    print("=" * 60)
    print(f"  Total supply:     {report['total_supply']}")
    print(f"  Sum of balances:  {report['sum_of_balances']}")
    print(f"  Discrepancy:      {report['discrepancy']}")
    print(f"  Accounts:         {report['accounts']}")
    print(f"  Transfers:        {report['transfers']}")
    print(f"  Manager balance:  {report['liquidity_manager_balance']}")
    print("-" * 60)
    for holder in report["top_holders"]:
        flag = " (exempt)" if holder["fee_exempt"] else ""
        print(f"  {holder['address']}: {holder['balance']}{flag}")
    print("=" * 60)
    print("  OK" if report["conserved"] else "  MISMATCH")
    print("=" * 60 + "\n")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Reconcile token supply")
    parser.add_argument("--top", type=int, default=10, help="Largest holders to list")
    parser.add_argument("--json", action="store_true", help="Print JSON")
    args = parser.parse_args()

    await init_db()
    try:
        report = await build_report(args.top)
    finally:
        await close_db()

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print_report(report)

    if not report["conserved"]:
        logger.error(f"Supply mismatch: discrepancy {report['discrepancy']}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
