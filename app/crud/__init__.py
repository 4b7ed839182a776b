from app.crud.habits import delete_habit, insert_habit, list_habits, update_habit
from app.crud.logs import delete_log, insert_log, list_logs, update_log

__all__ = [
    "list_habits",
    "insert_habit",
    "update_habit",
    "delete_habit",
    "list_logs",
    "insert_log",
    "update_log",
    "delete_log",
]
