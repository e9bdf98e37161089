from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

AppointmentStatus = Literal["pending", "confirmed", "in_progress", "completed", "cancelled"]
QuoteStatus = Literal["pending", "quoted", "accepted", "rejected"]


class AuthUser(BaseModel):
    id: int
    username: str
    role: str


class AuthLoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class AuthLoginUser(BaseModel):
    id: int
    username: str
    email: str
    role: str


class AuthLoginResponse(BaseModel):
    success: bool = True
    token: str
    expires_at: str
    user: AuthLoginUser


class AuthVerifyResponse(BaseModel):
    success: bool = True
    user: AuthUser


class ChangePasswordRequest(BaseModel):
    currentPassword: str = ""
    newPassword: str = ""


class SiteConfigRow(BaseModel):
    id: int
    key: str
    value: Optional[str] = None
    type: str = "text"
    description: Optional[str] = None
    updated_at: Optional[str] = None


class ConfigItem(BaseModel):
    key: str
    value: Any = None


class ConfigBulkUpdate(BaseModel):
    configs: list[ConfigItem]


class ConfigValueUpdate(BaseModel):
    value: Any = None


class Service(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price_from: Optional[float] = None
    image_url: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class GalleryEntry(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    before_image: Optional[str] = None
    after_image: Optional[str] = None
    service_id: Optional[int] = None
    service_title: Optional[str] = None
    is_featured: bool = False
    sort_order: int = 0
    created_at: Optional[str] = None


class ClientPayload(BaseModel):
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class Client(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    total_appointments: int = 0
    total_spent: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AppointmentCreate(BaseModel):
    client_name: str = ""
    client_email: Optional[str] = None
    client_phone: str = ""
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[int] = None
    vehicle_color: Optional[str] = None
    appointment_date: str = ""
    appointment_time: str = ""
    notes: Optional[str] = None


class AppointmentUpdate(AppointmentCreate):
    client_id: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    price: Optional[float] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    notes: Optional[str] = None


class Appointment(BaseModel):
    id: int
    client_id: Optional[int] = None
    client_name: str
    client_email: Optional[str] = None
    client_phone: str
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    service_title: Optional[str] = None
    client_name_db: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[int] = None
    vehicle_color: Optional[str] = None
    appointment_date: str
    appointment_time: str
    status: AppointmentStatus = "pending"
    notes: Optional[str] = None
    price: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AvailableTimesResponse(BaseModel):
    availableTimes: list[str]


class ClientDetails(Client):
    appointments: list[Appointment] = Field(default_factory=list)


class QuoteCreate(BaseModel):
    client_name: str = ""
    client_email: str = ""
    client_phone: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[int] = None
    services: list[Any] = Field(default_factory=list)
    message: Optional[str] = None


class QuoteUpdate(BaseModel):
    status: QuoteStatus
    quote_amount: Optional[float] = None
    admin_notes: Optional[str] = None
    valid_until: Optional[str] = None


class Quote(BaseModel):
    id: int
    client_name: str
    client_email: str
    client_phone: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[int] = None
    services: list[Any] = Field(default_factory=list)
    message: Optional[str] = None
    status: QuoteStatus = "pending"
    quote_amount: Optional[float] = None
    admin_notes: Optional[str] = None
    valid_until: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PostSummary(BaseModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    created_at: Optional[str] = None


class BlogPost(BaseModel):
    id: int
    title: str
    slug: str
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    is_published: bool = False
    author: str = "PurDetall"
    tags: list[str] = Field(default_factory=list)
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class NewsItem(BaseModel):
    id: int
    title: str
    slug: str
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    is_published: bool = False
    author: str = "PurDetall"
    category: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ContactRequest(BaseModel):
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str = ""
