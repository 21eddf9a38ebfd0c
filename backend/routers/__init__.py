from .auth import router as auth_router
from .tasks import router as tasks_router
from .timer import router as timer_router
from .stats import router as stats_router
