from enum import Enum


class ErrorCode(str, Enum):
    NOT_FOUND = 'NOT_FOUND'
    DUPLICATE_NAME = 'DUPLICATE_NAME'
    INGREDIENT_ALREADY_EXISTS = 'INGREDIENT_ALREADY_EXISTS'
    PACKAGING_ALREADY_EXISTS = 'PACKAGING_ALREADY_EXISTS'
    RECIPE_NOT_FOUND = 'RECIPE_NOT_FOUND'
    MATERIAL_NOT_FOUND = 'MATERIAL_NOT_FOUND'
    PACKAGING_NOT_FOUND = 'PACKAGING_NOT_FOUND'
    CATEGORY_NOT_FOUND = 'CATEGORY_NOT_FOUND'
    PACKAGING_IN_USE = 'PACKAGING_IN_USE'
    MATERIAL_IN_USE = 'MATERIAL_IN_USE'
    NAME_REQUIRED = 'NAME_REQUIRED'
    INVALID_VALUE = 'INVALID_VALUE'
    MIGRATION_FAILED = 'MIGRATION_FAILED'


class CostingError(Exception):
    """Base class for every named condition raised by the store layer"""
    code = None
    status = 400
    default_message = 'Request rejected'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)

    def to_dict(self):
        return {
            'success': False,
            'error': self.code.value,
            'message': self.message
        }


class NotFoundError(CostingError):
    code = ErrorCode.NOT_FOUND
    status = 404
    default_message = 'Record not found'


class DuplicateNameError(CostingError):
    code = ErrorCode.DUPLICATE_NAME
    status = 409
    default_message = 'A record with this name already exists'


class IngredientAlreadyExistsError(CostingError):
    code = ErrorCode.INGREDIENT_ALREADY_EXISTS
    status = 409
    default_message = 'This material is already an ingredient of the recipe'


class PackagingAlreadyExistsError(CostingError):
    code = ErrorCode.PACKAGING_ALREADY_EXISTS
    status = 409
    default_message = 'This packaging is already used by the recipe'


class RecipeNotFoundError(CostingError):
    code = ErrorCode.RECIPE_NOT_FOUND
    status = 404
    default_message = 'Recipe not found'


class MaterialNotFoundError(CostingError):
    code = ErrorCode.MATERIAL_NOT_FOUND
    status = 404
    default_message = 'Material not found'


class PackagingNotFoundError(CostingError):
    code = ErrorCode.PACKAGING_NOT_FOUND
    status = 404
    default_message = 'Packaging material not found'


class CategoryNotFoundError(CostingError):
    code = ErrorCode.CATEGORY_NOT_FOUND
    status = 404
    default_message = 'Category not found'


class _InUseError(CostingError):
    status = 409

    def __init__(self, recipe_names, message=None):
        self.recipe_names = list(recipe_names)
        super().__init__(message or f"{self.default_message}: {', '.join(self.recipe_names)}")

    def to_dict(self):
        data = super().to_dict()
        data['recipe_names'] = self.recipe_names
        return data


class PackagingInUseError(_InUseError):
    code = ErrorCode.PACKAGING_IN_USE
    default_message = 'Packaging is used by recipes'


class MaterialInUseError(_InUseError):
    code = ErrorCode.MATERIAL_IN_USE
    default_message = 'Material is used by recipes'


class NameRequiredError(CostingError):
    code = ErrorCode.NAME_REQUIRED
    default_message = 'Name is required'


class InvalidValueError(CostingError):
    code = ErrorCode.INVALID_VALUE

    def __init__(self, field, message=None):
        self.field = field
        super().__init__(message or f'Invalid value for {field}')

    def to_dict(self):
        data = super().to_dict()
        data['field'] = self.field
        return data


class MigrationError(CostingError):
    """Raised when a migration unit fails; the run stops at that unit"""
    code = ErrorCode.MIGRATION_FAILED
    status = 500

    def __init__(self, migration_id, migration_name, cause):
        self.migration_id = migration_id
        self.migration_name = migration_name
        self.cause = cause
        super().__init__(f'Migration {migration_id} ({migration_name}) failed: {cause}')

    def to_dict(self):
        data = super().to_dict()
        data['migration_id'] = self.migration_id
        data['migration_name'] = self.migration_name
        return data
