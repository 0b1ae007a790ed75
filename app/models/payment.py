from app.models.base import MongoModel, PyObjectId


class Payment(MongoModel):
    """Transfer of ``amount`` from payer to payee. Append-only."""
    group_id: PyObjectId
    payer_id: PyObjectId
    payee_id: PyObjectId
    amount: float
