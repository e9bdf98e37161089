from fastapi import Request

from purdetall.services.appointment_store import AppointmentStore
from purdetall.services.client_store import ClientStore
from purdetall.services.config_store import ConfigStore
from purdetall.services.contact_notifier import ContactNotifier
from purdetall.services.gallery_store import GalleryStore
from purdetall.services.post_store import BlogStore, NewsStore
from purdetall.services.quote_store import QuoteStore
from purdetall.services.service_store import ServiceStore
from purdetall.services.user_store import UserStore
from purdetall.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


def get_service_store(request: Request) -> ServiceStore:
    return request.app.state.service_store


def get_gallery_store(request: Request) -> GalleryStore:
    return request.app.state.gallery_store


def get_client_store(request: Request) -> ClientStore:
    return request.app.state.client_store


def get_appointment_store(request: Request) -> AppointmentStore:
    return request.app.state.appointment_store


def get_quote_store(request: Request) -> QuoteStore:
    return request.app.state.quote_store


def get_blog_store(request: Request) -> BlogStore:
    return request.app.state.blog_store


def get_news_store(request: Request) -> NewsStore:
    return request.app.state.news_store


def get_contact_notifier(request: Request) -> ContactNotifier:
    return request.app.state.contact_notifier
