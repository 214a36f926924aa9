from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.models.client import Client
from parcel_billing.schemas.client import ClientCreate


class ClientRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, client_id: UUID, for_update: bool = False) -> Client | None:
        query = self.db.query(Client).filter(Client.id == client_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def create(self, data: ClientCreate) -> Client:
        client = Client(
            name=data.name,
            currency=data.currency,
            net_payment_term=data.net_payment_term,
            cod_allowed=data.cod_allowed,
            fod_allowed=data.fod_allowed,
            manual_rate_tier_id=data.manual_rate_tier_id,
            cod_fee_percent=data.cod_fee_percent,
            cod_min_fee=data.cod_min_fee,
            cod_max_fee=data.cod_max_fee,
            custom_dom_base_rate=data.custom_dom_base_rate,
            custom_dom_per_kg=data.custom_dom_per_kg,
            custom_sdd_base_rate=data.custom_sdd_base_rate,
            custom_sdd_per_kg=data.custom_sdd_per_kg,
        )
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        return client
