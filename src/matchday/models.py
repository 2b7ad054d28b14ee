"""
Data records shared by the fixture generators and the tie-breaker.
"""
import uuid

SLOT_A = 'a'
SLOT_B = 'b'

# States of a fixture's team slot
SLOT_SCHEDULED = 'scheduled'
SLOT_BYE = 'bye'
SLOT_TBD = 'tbd'

PHASE_SHOOTOUT = 'shootout'
PHASE_GOLDEN_RAID = 'golden_raid'
PHASE_COMPLETE = 'complete'
PHASES = (PHASE_SHOOTOUT, PHASE_GOLDEN_RAID, PHASE_COMPLETE)

SIDES = ('A', 'B')


def other_side(side):
    return 'B' if side == 'A' else 'A'


def new_fixture_id():
    return str(uuid.uuid4())


class Team:
    def __init__(self, id, name=None):
        self.id = id
        self.name = name if name is not None else id

    @classmethod
    def from_dict(cls, data):
        team_id = data.get('id')
        return cls(id=str(team_id) if team_id is not None else '', name=data.get('name'))

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    def __eq__(self, other):
        return isinstance(other, Team) and (self.id, self.name) == (other.id, other.name)

    def __hash__(self):
        return hash((self.id, self.name))

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name})"


class Fixture:
    """
    One scheduled match slot.

    A missing team id means either a bye (the bracket was padded to a power
    of two) or a placeholder waiting on an earlier fixture. ``bye_slots``
    records which of the two it is, see ``slot_state``.
    """

    def __init__(self, id, team_a_id, team_b_id, round_number, match_number, round_name,
                 group_name=None, next_match_id=None, is_team_a_winner_slot=None, bye_slots=None):
        self.id = id
        self.team_a_id = team_a_id
        self.team_b_id = team_b_id
        self.round_number = round_number
        self.match_number = match_number
        self.round_name = round_name
        self.group_name = group_name
        self.next_match_id = next_match_id
        self.is_team_a_winner_slot = is_team_a_winner_slot
        self.bye_slots = set(bye_slots) if bye_slots else set()

    def team_id(self, slot):
        return self.team_a_id if slot == SLOT_A else self.team_b_id

    def set_team(self, slot, team_id):
        if slot == SLOT_A:
            self.team_a_id = team_id
        else:
            self.team_b_id = team_id
        self.bye_slots.discard(slot)

    def slot_state(self, slot):
        if self.team_id(slot) is not None:
            return SLOT_SCHEDULED
        if slot in self.bye_slots:
            return SLOT_BYE
        return SLOT_TBD

    @property
    def team_ids(self):
        return [t for t in (self.team_a_id, self.team_b_id) if t is not None]

    @property
    def is_walkover(self):
        """True when one side has a team and the other side is a bye."""
        states = {self.slot_state(SLOT_A), self.slot_state(SLOT_B)}
        return states == {SLOT_SCHEDULED, SLOT_BYE}

    @property
    def is_ready(self):
        return self.team_a_id is not None and self.team_b_id is not None

    def to_dict(self):
        data = {
            'id': self.id,
            'team_a_id': self.team_a_id,
            'team_b_id': self.team_b_id,
            'round_number': self.round_number,
            'match_number': self.match_number,
            'round_name': self.round_name,
        }
        if self.group_name is not None:
            data['group_name'] = self.group_name
        if self.next_match_id is not None:
            data['next_match_id'] = self.next_match_id
        if self.is_team_a_winner_slot is not None:
            data['is_team_a_winner_slot'] = self.is_team_a_winner_slot
        if self.bye_slots:
            data['bye_slots'] = sorted(self.bye_slots)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            team_a_id=data.get('team_a_id'),
            team_b_id=data.get('team_b_id'),
            round_number=data['round_number'],
            match_number=data['match_number'],
            round_name=data['round_name'],
            group_name=data.get('group_name'),
            next_match_id=data.get('next_match_id'),
            is_team_a_winner_slot=data.get('is_team_a_winner_slot'),
            bye_slots=data.get('bye_slots'),
        )

    def __repr__(self):
        return (f"Fixture(match_number={self.match_number}, round={self.round_name}, "
                f"team_a={self.team_a_id}, team_b={self.team_b_id})")


class TieBreakerState:
    """
    Snapshot of a tie-breaker between side 'A' and side 'B'.

    ``raiders`` holds each side's ordered shootout raiders when a line-up was
    registered; it may be empty.
    """

    def __init__(self, phase=PHASE_SHOOTOUT, score=None, raids=None, current_team='A',
                 golden_raid_team=None, winner=None, raiders=None):
        self.phase = phase
        self.score = dict(score) if score else {'A': 0, 'B': 0}
        self.raids = dict(raids) if raids else {'A': 0, 'B': 0}
        self.current_team = current_team
        self.golden_raid_team = golden_raid_team
        self.winner = winner
        self.raiders = {side: list(ids) for side, ids in (raiders or {}).items()}

    @property
    def total_raids(self):
        return self.raids['A'] + self.raids['B']

    @property
    def raiding_team(self):
        if self.phase == PHASE_GOLDEN_RAID:
            return self.golden_raid_team
        if self.phase == PHASE_SHOOTOUT:
            return self.current_team
        return None

    @property
    def current_raider_id(self):
        if self.phase != PHASE_SHOOTOUT:
            return None
        order = self.raiders.get(self.current_team) or []
        index = self.raids[self.current_team]
        return order[index] if index < len(order) else None

    @property
    def is_complete(self):
        return self.phase == PHASE_COMPLETE

    def copy(self):
        return TieBreakerState.from_dict(self.to_dict())

    def to_dict(self):
        data = {
            'phase': self.phase,
            'score': dict(self.score),
            'raids': dict(self.raids),
            'current_team': self.current_team,
            'golden_raid_team': self.golden_raid_team,
            'winner': self.winner,
        }
        if self.raiders:
            data['raiders'] = {side: list(ids) for side, ids in self.raiders.items()}
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            phase=data.get('phase', PHASE_SHOOTOUT),
            score=data.get('score'),
            raids=data.get('raids'),
            current_team=data.get('current_team', 'A'),
            golden_raid_team=data.get('golden_raid_team'),
            winner=data.get('winner'),
            raiders=data.get('raiders'),
        )

    def __eq__(self, other):
        return isinstance(other, TieBreakerState) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"TieBreakerState(phase={self.phase}, score={self.score}, raids={self.raids}, "
                f"current_team={self.current_team}, winner={self.winner})")
