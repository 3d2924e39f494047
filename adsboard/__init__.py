"""Дашборд рекламной статистики: фид, фильтры, агрегаты, выгрузка."""
