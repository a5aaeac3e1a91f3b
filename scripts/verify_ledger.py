from __future__ import annotations

import argparse
import sys

from mesconges import crud
from mesconges.db import session_scope
from mesconges.ledger import check_consistency


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check that stored balances match the sum of their ledger entries."
    )
    parser.add_argument(
        "--employee",
        type=int,
        action="append",
        default=None,
        help="Employee id to check (repeatable, default: every employee).",
    )
    return parser


def main() -> int:
    args = build_parser().parse_args()
    drifted = 0

    with session_scope() as db:
        if args.employee:
            employees = []
            for employee_id in args.employee:
                employee = crud.get_employee(db, employee_id)
                if employee is None:
                    print(f"employee {employee_id}: not found", file=sys.stderr)
                    return 2
                employees.append(employee)
        else:
            employees = crud.list_employees(db)

        for employee in employees:
            drift = check_consistency(db, employee)
            for kind, (stored, from_ledger) in drift.items():
                drifted += 1
                print(
                    f"employee {employee.id} {kind.value}: "
                    f"stored={stored} ledger={from_ledger}"
                )

        print(f"Checked {len(employees)} employee(s), {drifted} drifted balance(s).")

    return 1 if drifted else 0


if __name__ == "__main__":
    raise SystemExit(main())
