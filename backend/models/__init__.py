# Models package
from .user import UserModel, LoginRequest, LoginResponse
from .timer import Timer, TimerCreateRequest, TimerStopRequest, TimerResponse
from .task import Tag, TagIn, Task, TaskCreate, TaskUpdate, MigrateRequest
from .summary import TagStat, DaySummary
