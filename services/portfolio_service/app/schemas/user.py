from pydantic import BaseModel, ConfigDict


class CreateUserRequest(BaseModel):
    # Users carry no caller-supplied fields yet.
    pass


class UserResponse(BaseModel):
    id: int

    model_config = ConfigDict(from_attributes=True)
