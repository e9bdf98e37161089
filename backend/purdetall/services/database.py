import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterator, List, Optional

from purdetall.services.errors import StoreInternalError

logger = logging.getLogger(__name__)


DEFAULT_SITE_CONFIG = [
    ("site_name", "PurDetall", "text", "Nombre del sitio web"),
    (
        "site_description",
        "Detailing de vehículos profesional en El Vendrell, Tarragona. Servicios de lavado, encerado, protección y personalización de coches.",
        "textarea",
        "Descripción del sitio",
    ),
    (
        "site_keywords",
        "detailing, coches, el vendrell, tarragona, lavado, encerado, protección, personalización",
        "text",
        "Palabras clave SEO",
    ),
    ("contact_phone", "629780331", "text", "Teléfono de contacto"),
    ("contact_email", "info@purdetall.es", "email", "Email de contacto"),
    ("contact_address", "El Vendrell, Tarragona", "text", "Dirección de contacto"),
    ("whatsapp_number", "629780331", "text", "Número de WhatsApp"),
    (
        "whatsapp_message",
        "Hola, me gustaría solicitar información sobre sus servicios de detailing",
        "textarea",
        "Mensaje predeterminado de WhatsApp",
    ),
    ("hero_title", "MEJORAR | PROTEGER | MANTENER | PERSONALIZAR", "text", "Título principal del hero"),
    (
        "hero_subtitle",
        "PurDetall nació de la pasión por los coches y su presentación. Creado para redefinir cómo los propietarios de vehículos deben mantener la apariencia de sus coches.",
        "textarea",
        "Subtítulo del hero",
    ),
    ("about_title", "Sobre PurDetall", "text", "Título de la sección Acerca de"),
    (
        "about_content",
        "PurDetall es el especialista más exclusivo en detailing y protección de pintura de vehículos en El Vendrell, Tarragona.",
        "textarea",
        "Contenido de la sección Acerca de",
    ),
    ("facebook_url", "", "url", "URL de Facebook"),
    ("instagram_url", "", "url", "URL de Instagram"),
    ("youtube_url", "", "url", "URL de YouTube"),
    ("google_analytics", "", "textarea", "Código de Google Analytics"),
    (
        "business_hours",
        "Lunes a Viernes: 9:00 - 18:00\nSábados: 9:00 - 14:00\nDomingos: Cerrado",
        "textarea",
        "Horarios de atención",
    ),
]

DEFAULT_SERVICES = [
    {
        "title": "Mejora",
        "description": "Nuestros servicios exclusivos de detailing ofrecen todo el espectro de tratamientos para la restauración, mejora, preservación y mantenimiento continuo.",
        "short_description": "Restauración y mejora completa de tu vehículo",
        "price_from": 150.0,
        "sort_order": 1,
    },
    {
        "title": "Protección",
        "description": "Con nuestro diseño personalizado de película de protección de pintura podemos cubrir cualquier superficie pintada, fibra de carbono o acabado liso del coche.",
        "short_description": "Protección avanzada para la pintura de tu vehículo",
        "price_from": 300.0,
        "sort_order": 2,
    },
    {
        "title": "Mantenimiento",
        "description": "Nuestros lavados de mantenimiento son una parte crucial para mantener la integridad de tu tratamiento.",
        "short_description": "Mantenimiento regular para preservar los tratamientos",
        "price_from": 50.0,
        "sort_order": 3,
    },
    {
        "title": "Personalización",
        "description": "Nuestros servicios internos de cabina de pintura y acabados interiores permiten posibilidades ilimitadas cuando se trata de personalizar tu coche.",
        "short_description": "Personalización completa según tus gustos",
        "price_from": 200.0,
        "sort_order": 4,
    },
]

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT UNIQUE NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'admin',
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS site_config (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        key TEXT UNIQUE NOT NULL,
        value TEXT,
        type TEXT NOT NULL DEFAULT 'text',
        description TEXT,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS services (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        short_description TEXT,
        price_from REAL,
        image_url TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        sort_order INTEGER NOT NULL DEFAULT 0,
        seo_title TEXT,
        seo_description TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS gallery (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        before_image TEXT,
        after_image TEXT,
        service_id INTEGER,
        is_featured INTEGER NOT NULL DEFAULT 0,
        sort_order INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        phone TEXT,
        address TEXT,
        notes TEXT,
        total_appointments INTEGER NOT NULL DEFAULT 0,
        total_spent REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS appointments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id INTEGER,
        client_name TEXT NOT NULL,
        client_email TEXT,
        client_phone TEXT NOT NULL,
        service_id INTEGER,
        service_name TEXT,
        vehicle_make TEXT,
        vehicle_model TEXT,
        vehicle_year INTEGER,
        vehicle_color TEXT,
        appointment_date TEXT NOT NULL,
        appointment_time TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        notes TEXT,
        price REAL,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS quotes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        client_name TEXT NOT NULL,
        client_email TEXT NOT NULL,
        client_phone TEXT,
        vehicle_make TEXT,
        vehicle_model TEXT,
        vehicle_year INTEGER,
        services TEXT NOT NULL DEFAULT '[]',
        message TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        quote_amount REAL,
        admin_notes TEXT,
        valid_until TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS blog_posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        slug TEXT UNIQUE NOT NULL,
        content TEXT,
        excerpt TEXT,
        featured_image TEXT,
        is_published INTEGER NOT NULL DEFAULT 0,
        author TEXT NOT NULL DEFAULT 'PurDetall',
        tags TEXT NOT NULL DEFAULT '[]',
        seo_title TEXT,
        seo_description TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS news (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        slug TEXT UNIQUE NOT NULL,
        content TEXT,
        excerpt TEXT,
        featured_image TEXT,
        is_published INTEGER NOT NULL DEFAULT 0,
        author TEXT NOT NULL DEFAULT 'PurDetall',
        category TEXT,
        seo_title TEXT,
        seo_description TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_appointments_slot ON appointments (appointment_date, appointment_time)",
]


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}


def rows_to_dicts(rows: List[sqlite3.Row]) -> List[Dict[str, Any]]:
    return [{key: row[key] for key in row.keys()} for row in rows]


@dataclass
class Database:
    db_path: str

    def __post_init__(self) -> None:
        self._lock = Lock()
        path = Path(self.db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(path)
        self._init_db()
        self._seed_if_needed()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def transaction(self, error_message: str = "Error en la base de datos") -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = self._connect()
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                logger.exception("Database operation failed: %s", error_message)
                raise StoreInternalError(error_message) from exc
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def ping(self) -> bool:
        try:
            with self.transaction() as conn:
                conn.execute("SELECT 1").fetchone()
        except StoreInternalError:
            return False
        return True

    def _init_db(self) -> None:
        with self.transaction("Error al inicializar la base de datos") as conn:
            for statement in SCHEMA:
                conn.execute(statement)
            self._ensure_column(conn, "appointments", "price", "REAL")
            self._ensure_column(conn, "quotes", "valid_until", "TEXT")
            self._ensure_column(conn, "news", "category", "TEXT")
        logger.info("Database ready at %s", self.db_path)

    def _ensure_column(self, conn: sqlite3.Connection, table: str, column: str, definition: str) -> None:
        columns = conn.execute(f"PRAGMA table_info({table})").fetchall()
        existing = {row["name"] for row in columns}
        if column in existing:
            return
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")

    def _seed_if_needed(self) -> None:
        with self.transaction("Error al inicializar la base de datos") as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO site_config (key, value, type, description) VALUES (?, ?, ?, ?)",
                DEFAULT_SITE_CONFIG,
            )
            existing = conn.execute("SELECT COUNT(*) AS total FROM services").fetchone()
            if existing["total"] == 0:
                conn.executemany(
                    """
                    INSERT INTO services (title, description, short_description, price_from, sort_order)
                    VALUES (:title, :description, :short_description, :price_from, :sort_order)
                    """,
                    DEFAULT_SERVICES,
                )
                logger.info("Seeded %d default services", len(DEFAULT_SERVICES))
