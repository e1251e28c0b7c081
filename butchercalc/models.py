import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

# Tables are created by migrations.py; these mappings only describe them.
Base = declarative_base()

MASS_UNITS = ('kg', 'g')
PACKAGING_UNIT_TYPES = ('piece', 'meter', 'roll', 'sheet', 'box', 'bag')
CATEGORY_TYPES = ('material', 'recipe')
SETTING_TYPES = ('string', 'number', 'boolean')


def new_id():
    return str(uuid.uuid4())


def utc_timestamp():
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2026-01-13T13:39:48.123Z"""
    now = datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f'{now.microsecond // 1000:03d}Z'


class Category(Base):
    __tablename__ = 'categories'

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # 'material' or 'recipe'
    color = Column(String, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'color': self.color
        }


class SourceMaterial(Base):
    __tablename__ = 'source_materials'

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    category_id = Column(String, ForeignKey('categories.id'), nullable=True)
    current_price = Column(Float, nullable=False)
    unit_of_measure = Column(String, nullable=False)  # 'kg' or 'g'
    supplier = Column(String, nullable=True)
    sku = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(String, nullable=False, default=utc_timestamp)
    updated_at = Column(String, nullable=False, default=utc_timestamp)
    is_archived = Column(Boolean, default=False)


    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category_id': self.category_id,
            'current_price': self.current_price,
            'unit_of_measure': self.unit_of_measure,
            'supplier': self.supplier,
            'sku': self.sku,
            'notes': self.notes,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'is_archived': bool(self.is_archived)
        }


class PriceHistory(Base):
    """Append-only price log. Nothing writes to it yet."""
    __tablename__ = 'price_history'

    id = Column(String, primary_key=True, default=new_id)
    material_id = Column(String, ForeignKey('source_materials.id'), nullable=False)
    price = Column(Float, nullable=False)
    effective_date = Column(String, nullable=False)
    notes = Column(Text, nullable=True)


class PackagingMaterial(Base):
    __tablename__ = 'packaging_materials'

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    unit_price = Column(Float, nullable=False)
    unit_type = Column(String, nullable=False)  # see PACKAGING_UNIT_TYPES
    supplier = Column(String, nullable=True)
    sku = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(String, nullable=False, default=utc_timestamp)
    updated_at = Column(String, nullable=False, default=utc_timestamp)
    is_archived = Column(Boolean, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'unit_price': self.unit_price,
            'unit_type': self.unit_type,
            'supplier': self.supplier,
            'sku': self.sku,
            'notes': self.notes,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'is_archived': bool(self.is_archived)
        }


class Recipe(Base):
    __tablename__ = 'recipes'

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(String, ForeignKey('categories.id'), nullable=True)
    yield_quantity = Column(Float, nullable=False)
    yield_unit = Column(String, nullable=False)
    prep_time_minutes = Column(Integer, nullable=True)
    instructions = Column(Text, nullable=True)
    profit_margin = Column(Float, nullable=True)
    waste_percentage = Column(Float, nullable=True)
    vat_percentage = Column(Float, nullable=True)
    created_at = Column(String, nullable=False, default=utc_timestamp)
    updated_at = Column(String, nullable=False, default=utc_timestamp)
    is_archived = Column(Boolean, default=False)
    is_favorite = Column(Boolean, default=False)

    ingredients = relationship(
        'RecipeIngredient', back_populates='recipe',
        order_by='RecipeIngredient.sort_order',
        cascade='all, delete-orphan', passive_deletes=True
    )
    packaging = relationship(
        'RecipePackaging', back_populates='recipe',
        order_by='RecipePackaging.sort_order',
        cascade='all, delete-orphan', passive_deletes=True
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category_id': self.category_id,
            'yield_quantity': self.yield_quantity,
            'yield_unit': self.yield_unit,
            'prep_time_minutes': self.prep_time_minutes,
            'instructions': self.instructions,
            'profit_margin': self.profit_margin,
            'waste_percentage': self.waste_percentage,
            'vat_percentage': self.vat_percentage,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'is_archived': bool(self.is_archived),
            'is_favorite': bool(self.is_favorite)
        }


class RecipeIngredient(Base):
    __tablename__ = 'recipe_ingredients'

    id = Column(String, primary_key=True, default=new_id)
    recipe_id = Column(String, ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False)
    material_id = Column(String, ForeignKey('source_materials.id', ondelete='RESTRICT'), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)  # 'kg' or 'g'
    sort_order = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    recipe = relationship('Recipe', back_populates='ingredients')
    material = relationship('SourceMaterial')

    def to_dict(self, with_material=False):
        data = {
            'id': self.id,
            'recipe_id': self.recipe_id,
            'material_id': self.material_id,
            'quantity': self.quantity,
            'unit': self.unit,
            'sort_order': self.sort_order,
            'notes': self.notes
        }
        if with_material:
            data['material'] = {
                'id': self.material.id,
                'name': self.material.name,
                'current_price': self.material.current_price,
                'unit_of_measure': self.material.unit_of_measure
            }
        return data


class RecipePackaging(Base):
    __tablename__ = 'recipe_packaging'

    id = Column(String, primary_key=True, default=new_id)
    recipe_id = Column(String, ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False)
    packaging_material_id = Column(String, ForeignKey('packaging_materials.id', ondelete='RESTRICT'), nullable=False)
    quantity = Column(Float, nullable=False)
    sort_order = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    recipe = relationship('Recipe', back_populates='packaging')
    packaging_material = relationship('PackagingMaterial')

    def to_dict(self, with_material=False):
        data = {
            'id': self.id,
            'recipe_id': self.recipe_id,
            'packaging_material_id': self.packaging_material_id,
            'quantity': self.quantity,
            'sort_order': self.sort_order,
            'notes': self.notes
        }
        if with_material:
            data['packaging_material'] = {
                'id': self.packaging_material.id,
                'name': self.packaging_material.name,
                'unit_price': self.packaging_material.unit_price,
                'unit_type': self.packaging_material.unit_type
            }
        return data


class Setting(Base):
    __tablename__ = 'settings'

    id = Column(String, primary_key=True, default=new_id)
    key = Column(String, nullable=False, unique=True)
    value = Column(String, nullable=False)
    setting_type = Column(String, nullable=False)  # see SETTING_TYPES
    created_at = Column(String, nullable=False, default=utc_timestamp)
    updated_at = Column(String, nullable=False, default=utc_timestamp)

    def to_dict(self):
        return {
            'id': self.id,
            'key': self.key,
            'value': self.value,
            'setting_type': self.setting_type,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }
