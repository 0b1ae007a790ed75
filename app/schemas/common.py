from typing import Annotated

from pydantic import BeforeValidator, Field, PlainSerializer

# ObjectIds leave the API as 24-character hex strings
ObjectIdStr = Annotated[str, BeforeValidator(str)]

# Amounts are stored unrounded and reported in cents
Money = Annotated[float, PlainSerializer(lambda value: round(value, 2), return_type=float)]

# Request amounts: inf and nan (e.g. the JSON literal 1e309) are rejected
Amount = Annotated[float, Field(allow_inf_nan=False)]
