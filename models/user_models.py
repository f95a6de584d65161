"""
User Contact Models

The contact profile that deadline jobs resolve before dispatching.
Account management lives outside this project; only the fields the
dispatcher needs are kept here.
"""

from typing import Optional

from pydantic import BaseModel

class UserContact(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "u123456",
                "email": "ada@example.com",
                "full_name": "Ada Lovelace",
            }
        }
