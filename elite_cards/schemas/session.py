from pydantic import BaseModel, ConfigDict, Field

from elite_cards.core.enums import UserRole


class SessionClaims(BaseModel):
    """Identity carried in the session cookie"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(alias="userId")
    shop_domain: str = Field(alias="shopDomain")
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
