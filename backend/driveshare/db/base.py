# Import all the models, so that Base has them before being
# imported by Alembic or create_all
from driveshare.db.base_class import Base  # noqa
from driveshare.models.user import User  # noqa
from driveshare.models.file import File  # noqa
from driveshare.models.share import ShareLink  # noqa
