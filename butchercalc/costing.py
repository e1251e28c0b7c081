"""
Recipe cost aggregation.

Costs are always computed from the current ingredient/packaging rows and the
current material and packaging prices; nothing here is cached or stored.
"""

GRAMS_PER_KILOGRAM = 1000.0


def to_grams(quantity, unit):
    if unit == 'kg':
        return quantity * GRAMS_PER_KILOGRAM
    return quantity


def price_per_gram(price, unit_of_measure):
    if unit_of_measure == 'kg':
        return price / GRAMS_PER_KILOGRAM
    return price


def calculate_ingredient_cost(quantity, unit, material_price, material_unit):
    """Cost of one ingredient line; ingredient and material units may differ"""
    return to_grams(quantity, unit) * price_per_gram(material_price, material_unit)


def calculate_packaging_cost(quantity, unit_price):
    return quantity * unit_price


def calculate_recipe_costs(ingredients, packaging):
    """
    Aggregate costs for a recipe.

    ingredients: RecipeIngredient rows with their material loaded
    packaging: RecipePackaging rows with their packaging_material loaded
    """
    ingredients_cost = 0.0
    for ingredient in ingredients:
        ingredients_cost += calculate_ingredient_cost(
            ingredient.quantity,
            ingredient.unit,
            ingredient.material.current_price,
            ingredient.material.unit_of_measure
        )

    packaging_cost = 0.0
    for item in packaging:
        packaging_cost += calculate_packaging_cost(item.quantity, item.packaging_material.unit_price)

    return {
        'ingredients_cost': ingredients_cost,
        'packaging_cost': packaging_cost,
        'total_cost': ingredients_cost + packaging_cost
    }


def calculate_gross_weight(ingredients):
    """Sum of ingredient quantities in grams"""
    return sum(to_grams(i.quantity, i.unit) for i in ingredients)


def calculate_price_breakdown(recipe, costs, labor_rate_per_hour, default_vat_rate):
    """
    Selling-price breakdown for a recipe.

    Adds labor from the prep time, spreads the full cost over the yield,
    applies the profit margin and VAT, and reports weight after waste.
    The recipe's own VAT percentage wins over default_vat_rate.
    """
    labor_cost = 0.0
    if recipe.prep_time_minutes:
        labor_cost = (recipe.prep_time_minutes / 60.0) * labor_rate_per_hour

    full_cost = costs['ingredients_cost'] + costs['packaging_cost'] + labor_cost
    cost_per_unit = full_cost / recipe.yield_quantity

    suggested_price = cost_per_unit
    if recipe.profit_margin:
        suggested_price = cost_per_unit * (1 + recipe.profit_margin / 100.0)

    vat_percentage = recipe.vat_percentage
    if vat_percentage is None:
        vat_percentage = default_vat_rate
    vat_amount = suggested_price * (vat_percentage / 100.0)

    gross_weight = calculate_gross_weight(recipe.ingredients)
    waste_weight = 0.0
    if recipe.waste_percentage:
        waste_weight = gross_weight * (recipe.waste_percentage / 100.0)
    net_weight = gross_weight - waste_weight

    cost_per_kg = 0.0
    if net_weight > 0:
        cost_per_kg = full_cost / (net_weight / GRAMS_PER_KILOGRAM)

    return {
        'ingredients_cost': costs['ingredients_cost'],
        'packaging_cost': costs['packaging_cost'],
        'labor_rate_per_hour': labor_rate_per_hour,
        'labor_cost': labor_cost,
        'full_cost': full_cost,
        'cost_per_unit': cost_per_unit,
        'suggested_price': suggested_price,
        'profit_amount': suggested_price - cost_per_unit,
        'vat_percentage': vat_percentage,
        'vat_amount': vat_amount,
        'price_including_vat': suggested_price + vat_amount,
        'gross_weight_grams': gross_weight,
        'waste_weight_grams': waste_weight,
        'net_weight_grams': net_weight,
        'cost_per_kg': cost_per_kg
    }
