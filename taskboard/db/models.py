# Import all models here so Base.metadata knows every table
from taskboard.db.base import Base
from taskboard.models.user import User
from taskboard.models.board import Board
from taskboard.models.column import Column
from taskboard.models.task import Task
