"""
Condo Sync - Vote Ledger
Votos são acrescentados e nunca alterados: um por unidade em cada votação.
"""
from datetime import date, datetime
from typing import List, Sequence

from condosync.core.errors import ConflictError, PolicyError, Reason, ValidationError
from condosync.schemas import Ballot, OptionResult, Voting, VotingPhase


def voting_phase(voting: Voting, today: date) -> VotingPhase:
    """Fase derivada das datas; end_date vale até o fim do dia"""
    if isinstance(today, datetime):
        today = today.date()
    if today < voting.start_date:
        return VotingPhase.FUTURE
    if today > voting.end_date:
        return VotingPhase.CLOSED
    return VotingPhase.ACTIVE


def validate_ballot(voting: Voting, house_number: int, option_ids: Sequence[str]) -> List[str]:
    """
    Levanta DuplicateVote se a unidade já votou, InvalidChoice se a seleção
    for vazia, repetida, desconhecida ou múltipla sem permissão.
    Retorna a seleção normalizada.
    """
    if any(ballot.house_number == house_number for ballot in voting.votes):
        raise ConflictError(Reason.DUPLICATE_VOTE)

    chosen = list(option_ids or [])
    if not chosen:
        raise ValidationError(Reason.INVALID_CHOICE, "Selecione pelo menos uma opção.")
    if len(set(chosen)) != len(chosen):
        raise ValidationError(Reason.INVALID_CHOICE, "Opção selecionada mais de uma vez.")

    known = {option.id for option in voting.options}
    if any(option_id not in known for option_id in chosen):
        raise ValidationError(Reason.INVALID_CHOICE, "Opção inexistente nesta votação.")
    if len(chosen) > 1 and not voting.allow_multiple_choices:
        raise ValidationError(Reason.INVALID_CHOICE, "Esta votação permite apenas uma opção.")

    return chosen


def ensure_active(voting: Voting, today: date):
    if voting_phase(voting, today) != VotingPhase.ACTIVE:
        raise PolicyError(Reason.VOTING_NOT_ACTIVE)


def tally(voting: Voting) -> List[OptionResult]:
    """
    Resultado por opção. Percentual sobre o total de cédulas, arredondado
    de forma independente (a soma pode não dar 100).
    """
    total = len(voting.votes)
    counts = {option.id: 0 for option in voting.options}
    for ballot in voting.votes:
        for option_id in ballot.option_ids:
            if option_id in counts:
                counts[option_id] += 1

    top = max(counts.values(), default=0)
    return [
        OptionResult(
            option_id=option.id,
            text=option.text,
            count=counts[option.id],
            percentage=0 if total == 0 else round(counts[option.id] / total * 100),
            is_winner=top > 0 and counts[option.id] == top
        )
        for option in voting.options
    ]


def winners(voting: Voting) -> List[str]:
    return [result.option_id for result in tally(voting) if result.is_winner]


def household_ballot(voting: Voting, house_number: int):
    return next((b for b in voting.votes if b.house_number == house_number), None)


def ballot_key(voting_id: str, house_number: int) -> str:
    return f"{voting_id}:{house_number}"


def new_ballot(user_id: str, user_name: str, house_number: int, option_ids: Sequence[str], timestamp: datetime) -> Ballot:
    return Ballot(
        user_id=user_id,
        user_name=user_name,
        house_number=house_number,
        option_ids=list(option_ids),
        timestamp=timestamp
    )
