from django.apps import AppConfig
import logging

logger = logging.getLogger(__name__)


class StoreConfig(AppConfig):
    name = "store"

    def ready(self):
        """
        Configure Cloudinary from settings on startup.
        Missing credentials only disable uploads; the storefront still runs.
        """
        import cloudinary
        from django.conf import settings

        conf = {k: v for k, v in getattr(settings, "CLOUDINARY", {}).items() if v}
        url = conf.pop("url", None)
        if url:
            cloudinary.config(cloudinary_url=url, secure=True)
        elif conf:
            cloudinary.config(secure=True, **conf)
        else:
            logger.warning("Cloudinary is not configured; image uploads will fail.")
            return
        logger.info("Cloudinary configured for cloud %s", cloudinary.config().cloud_name)
