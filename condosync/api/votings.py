"""
Condo Sync - Votings API
Fase e resultado são calculados a cada leitura
"""
from fastapi import APIRouter, Depends, HTTPException, status

from condosync.schemas import User, Voting, VotingCreate, VoteCast
from condosync.sync import MutationGateway, tally, voting_phase
from condosync.sync.votes import household_ballot
from condosync.api.deps import get_gateway, done

router = APIRouter(prefix="/votings", tags=["Votings"])


def voting_view(voting: Voting, user: User, today) -> dict:
    ballot = household_ballot(voting, user.house_number)
    return {
        **voting.model_dump(mode="json", exclude={"votes"}),
        "phase": voting_phase(voting, today).value,
        "total_votes": len(voting.votes),
        "results": [r.model_dump() for r in tally(voting)],
        "my_household_vote": ballot.option_ids if ballot else None,
    }


@router.get("")
async def list_votings(gateway: MutationGateway = Depends(get_gateway)):
    today = gateway.today()
    return [voting_view(v, gateway.actor, today) for v in gateway.entities.votings]


@router.get("/{voting_id}")
async def get_voting(voting_id: str, gateway: MutationGateway = Depends(get_gateway)):
    voting = gateway.entities.get("votings", voting_id)
    if voting is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Votação não encontrada"
        )
    return voting_view(voting, gateway.actor, gateway.today())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_voting(data: VotingCreate, gateway: MutationGateway = Depends(get_gateway)):
    voting_id = await gateway.create_voting(data)
    return done(gateway, id=voting_id)


@router.delete("/{voting_id}")
async def delete_voting(voting_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.delete_voting(voting_id)
    return done(gateway, id=voting_id)


@router.post("/{voting_id}/votes", status_code=status.HTTP_201_CREATED)
async def cast_vote(voting_id: str, data: VoteCast, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.cast_vote(voting_id, data.option_ids)
    return done(gateway, id=voting_id)
