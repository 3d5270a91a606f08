"""Monitor subsystem — endpoint store, prober, check coordinator, scheduler."""

from .checker import CheckCoordinator
from .models import DowntimeRecord, Endpoint, EndpointStatus, Status, StatusRecord
from .prober import Prober
from .scheduler import MonitorScheduler
from .store import MonitorStore
