# storefront/services/menu.py
from typing import Dict, Iterable, List

from storefront.models.content import WPMenuItem, WPMenuItemWithChildren


def build_menu_tree(items: Iterable[WPMenuItem]) -> List[WPMenuItemWithChildren]:
    """
    Собирает дерево меню из плоского списка.
    Элементы без parent_id или с неизвестным родителем становятся корнями.
    Входные данные считаются ацикличными (так их отдает CMS).
    """
    items = list(items)
    nodes: Dict[str, WPMenuItemWithChildren] = {
        item.id: WPMenuItemWithChildren(**item.model_dump(), children=[]) for item in items
    }
    roots: List[WPMenuItemWithChildren] = []
    for item in items:
        node = nodes[item.id]
        if item.parent_id and item.parent_id in nodes:
            nodes[item.parent_id].children.append(node)
        else:
            roots.append(node)
    return roots


def _normalize_path(path: str) -> str:
    # Срезается один завершающий слэш
    if path.endswith('/'):
        path = path[:-1]
    return path or '/'


def is_active_path(item_path: str, current_path: str) -> bool:
    return _normalize_path(item_path) == _normalize_path(current_path)


def mark_active_items(tree: List[WPMenuItemWithChildren], current_path: str) -> List[WPMenuItemWithChildren]:
    """Выставляет active у пунктов, чей path совпадает с текущим путем (на любом уровне)."""
    for node in tree:
        node.active = is_active_path(node.path, current_path)
        mark_active_items(node.children, current_path)
    return tree
