from .db import db
from .audit_log import AuditLog
from .event import Event
from .booking import Booking
