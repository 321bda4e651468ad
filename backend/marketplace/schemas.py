from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class Contract(ApiModel):
    id: int
    terms: str
    status: str
    client_id: int
    contractor_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Job(ApiModel):
    id: int
    description: str
    price: float
    paid: bool
    payment_date: datetime | None = None
    deposit_paid: bool
    contract_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class JobWithContract(Job):
    contract: Contract


class Message(BaseModel):
    message: str


class DepositSummary(ApiModel):
    message: str = "Deposit paid"
    jobs: int = 0
    paid: float = 0.0
    total_jobs_paid: int = 0


class BestProfession(BaseModel):
    profession: str


class BestClient(ApiModel):
    id: int
    full_name: str
    paid: float
