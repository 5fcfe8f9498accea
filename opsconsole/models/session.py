from pydantic import BaseModel

class User(BaseModel):
    name: str
    email: str

class Toast(BaseModel):
    id: str
    title: str
    variant: str = "success"

class SessionWarning(BaseModel):
    visible: bool = False
    countdown: int = 0
