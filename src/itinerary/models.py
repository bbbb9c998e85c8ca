"""Pydantic models for the itinerary dataset.

All data structures use Pydantic v2 for validation, serialization, and type safety.
The dataset is camelCase JSON; models accept the wire names as aliases and
expose snake_case attributes.
"""

from pydantic import BaseModel, Field

UNSCHEDULED = "TBD"

_WIRE_CONFIG = {"populate_by_name": True, "extra": "ignore"}


class ScheduleEvent(BaseModel):
    """One meeting or booth tour on the conference schedule.

    Everything except ``assigned_to`` is fixed once the dataset is loaded;
    assignments are overlaid from the AssignmentStore.
    """

    id: str
    day: str  # "monday", "tuesday"
    time: str  # "9:00 AM", "10:00am-10:30am PST" or "TBD"
    end_time: str | None = Field(default=None, alias="endTime")
    type: str = "meeting"  # "meeting", "booth_tour" - display only
    broker: str = ""  # Broker.id
    ticker: str = ""  # Company.ticker
    company: str = ""
    booth: str = ""
    location: str | None = None
    host: str | None = None
    duration: int | None = None  # minutes, informational only
    travel: str | None = None
    assigned_to: str | None = Field(default=None, alias="assignedTo")
    notes: str | None = None

    model_config = _WIRE_CONFIG

    @property
    def is_scheduled(self) -> bool:
        return self.time.strip().upper() != UNSCHEDULED


class BrokerContact(BaseModel):
    name: str
    role: str = ""


class Broker(BaseModel):
    """A sell-side broker hosting meetings at the event."""

    id: str
    name: str
    full_name: str | None = Field(default=None, alias="fullName")
    color: str = ""
    analysts: list[str] = Field(default_factory=list)
    sales: list[str] = Field(default_factory=list)
    team: list[BrokerContact] = Field(default_factory=list)
    insights: str | list[str] | None = None
    focus: str | list[str] | None = None

    model_config = _WIRE_CONFIG

    @property
    def team_size(self) -> int:
        return len(self.team) + len(self.analysts)


class TeamMember(BaseModel):
    id: str
    name: str


class Company(BaseModel):
    """A listed company exhibiting or meeting at the event."""

    ticker: str
    name: str
    booth: str = ""
    segment: str = ""
    stack_position: str = Field(default="", alias="stackPosition")
    tldr: str = ""
    value_prop: str = Field(default="", alias="valueProp")
    market_cap: str = Field(default="", alias="marketCap")
    key_products: list[str] = Field(default_factory=list, alias="keyProducts")
    notes: str = ""

    model_config = _WIRE_CONFIG


class EventInfo(BaseModel):
    name: str
    location: str = ""
    dates: str = ""
    venue: str | None = None


class ItineraryData(BaseModel):
    """The full static dataset, fetched once per session."""

    event: EventInfo
    team: list[TeamMember] = Field(default_factory=list, alias="conestogaTeam")
    brokers: list[Broker] = Field(default_factory=list)
    schedule: list[ScheduleEvent] = Field(default_factory=list)
    companies: list[Company] = Field(default_factory=list)

    model_config = _WIRE_CONFIG


class Catalog:
    """Read-only id lookups over the dataset's entity tables.

    Lookups never raise: a missing id returns None, and the ``*_name`` helpers
    degrade to the raw identifier.
    """

    def __init__(self, data: ItineraryData) -> None:
        self.event = data.event
        self.brokers: dict[str, Broker] = {b.id: b for b in data.brokers}
        self.members: dict[str, TeamMember] = {m.id: m for m in data.team}
        self.companies: dict[str, Company] = {c.ticker: c for c in data.companies}

    def broker(self, broker_id: str | None) -> Broker | None:
        return self.brokers.get(broker_id) if broker_id else None

    def broker_name(self, broker_id: str) -> str:
        broker = self.broker(broker_id)
        return broker.name if broker and broker.name else broker_id

    def member(self, member_id: str | None) -> TeamMember | None:
        return self.members.get(member_id) if member_id else None

    def member_name(self, member_id: str) -> str:
        member = self.member(member_id)
        return member.name if member and member.name else member_id

    def company(self, ticker: str | None) -> Company | None:
        return self.companies.get(ticker) if ticker else None

    def company_name(self, ticker: str) -> str:
        company = self.company(ticker)
        return company.name if company and company.name else ticker
