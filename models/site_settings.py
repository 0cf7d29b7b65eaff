"""Site settings model."""

from repositories.records import SiteSettingsRecord

from . import db


SETTINGS_KEY = "settings"


class SiteSettings(db.Model):
    """Singleton row holding site-wide presentation settings."""

    __tablename__ = "site_settings"

    key = db.Column(db.String(32), primary_key=True, default=SETTINGS_KEY)
    banner_url = db.Column(db.String(512), nullable=True)
    updated_at = db.Column(db.DateTime, nullable=True)

    def to_record(self) -> SiteSettingsRecord:
        return SiteSettingsRecord(banner_url=self.banner_url, updated_at=self.updated_at)
