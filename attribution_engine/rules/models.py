from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class StorageKeyRules(BaseModel):
    attribution_record: str
    traffic_source_sent: str
    analytics_linked: str
    login_tracked: str
    analytics_user_id: str
    analytics_session_id: str
    auth_user_id: str
    locale: str

class StorageRules(BaseModel):
    long_lived_db_path: str
    keys: StorageKeyRules

class ClickIdRule(BaseModel):
    param: str
    source: str
    medium: str

class ReferrerRule(BaseModel):
    match: str
    source: str
    medium: str

class ClassifierRules(BaseModel):
    click_ids: list[ClickIdRule]
    referrers: list[ReferrerRule]
    medium_aliases: dict[str, list[str]]

class PhoneRules(BaseModel):
    country_code: str
    local_lengths: list[int] = Field(min_length=1)

class IdentityRules(BaseModel):
    default_country: str | None = None
    phone: PhoneRules
    state_codes: dict[str, str] = {}
    country_codes: dict[str, str] = {}

class TrackingRules(BaseModel):
    login_event: str
    login_method: str

class DispatchRules(BaseModel):
    base_url: str
    endpoint: str
    timeout_seconds: float = Field(gt=0)

class Rules(BaseModel):
    project: ProjectRules
    storage: StorageRules
    classifier: ClassifierRules
    identity: IdentityRules
    tracking: TrackingRules
    dispatch: DispatchRules
