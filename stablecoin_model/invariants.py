"""Protocol-wide invariant checks over an engine instance."""

from typing import List

from .errors import InvariantViolation, OracleError


def check_protocol_invariants(engine) -> List[str]:
    """
    Returns a list of violated invariants (empty when all hold).

    Checked:
    - debt token supply <= USD value of all collateral in the engine
    - engine custody of each asset equals the sum of recorded deposits
    - debt token supply equals the sum of minted debt
    - per-account queries answer without raising for every known account
    """
    violations = []

    total_supply = engine.debt_token.total_supply
    total_value = engine.collateral.total_collateral_value_usd()
    if total_supply > total_value:
        violations.append(f"debt supply {total_supply} exceeds collateral value {total_value}")

    for address, asset in engine.assets.items():
        held = asset.token.balance_of(engine.address)
        recorded = engine.collateral.total_collateral(address)
        if held != recorded:
            violations.append(f"custody of {address} is {held}, deposits record {recorded}")

    recorded_debt = engine.get_total_debt()
    if recorded_debt != total_supply:
        violations.append(f"minted debt {recorded_debt} differs from debt supply {total_supply}")

    for account in engine.state.accounts():
        try:
            engine.get_account_information(account)
            engine.get_health_factor(account)
        except OracleError:
            raise
        except Exception as exc:
            violations.append(f"query for {account} raised {exc!r}")

    return violations


def assert_protocol_invariants(engine) -> None:
    violations = check_protocol_invariants(engine)
    if violations:
        raise InvariantViolation(violations)
