from .categories import categories_blueprint
from .materials import materials_blueprint
from .packaging import packaging_blueprint
from .recipes import recipes_blueprint
from .settings import settings_blueprint

__all__ = [
    'categories_blueprint',
    'materials_blueprint',
    'packaging_blueprint',
    'recipes_blueprint',
    'settings_blueprint',
]
