from pydantic import BaseModel, Field


class TokenData(BaseModel):
    sub: str | None = Field(
        default=None,
        description="Subject (Supabase user identifier) of the token",
    )
    email: str | None = Field(
        default=None,
        description="Email claim, when the provider includes one",
    )
    role: str = Field(
        default="authenticated",
        description="Supabase role claim",
    )


class CurrentUser(BaseModel):
    """Authenticated caller resolved from a verified access token."""

    id: str = Field(..., description="Supabase user id")
    email: str | None = Field(default=None, description="Email of the caller")
