"""Слой хранения: пользователи дашборда."""
