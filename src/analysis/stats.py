"""Bilans victoires / défaites."""

from typing import Iterable

from src.models import MatchResult, Outcome, OutcomeRates


def compute_outcome_rates(results: Iterable[MatchResult]) -> OutcomeRates:
    """Calcule le bilan d'un ensemble de parties.

    Args:
        results: Parties (point de vue our_tag).

    Returns:
        OutcomeRates avec les comptages ; win_rate vaut None si aucune partie.
    """
    rates = OutcomeRates()
    for r in results:
        rates.total += 1
        if r.result == Outcome.WIN:
            rates.wins += 1
        elif r.result == Outcome.LOSS:
            rates.losses += 1
        else:
            rates.draws += 1
    return rates


def format_record(rates: OutcomeRates) -> str:
    """Formate un bilan compact, ex: "3W / 1L (75%)".

    Les égalités n'apparaissent que si elles existent.
    """
    if rates.total <= 0:
        return "Aucune partie"
    parts = [f"{rates.wins}W", f"{rates.losses}L"]
    if rates.draws:
        parts.append(f"{rates.draws}D")
    return f"{' / '.join(parts)} ({rates.win_rate:.0f}%)"
