# src/onepiece_api/services/resources.py
from typing import Dict

from onepiece_api.core.exceptions import ErrorCode
from onepiece_api.database import models
from onepiece_api.query.filter_builder import FilterKind, FilterSpec, RangeSpec
from onepiece_api.services.resource_config import (
    FieldKind, FieldSpec, ReferenceGuard, Include, Listing, ResourceConfig
)

TIMESTAMP_SORTS = ('created_at', 'updated_at')


def _catalog_fields(extra=()):
    return (
        FieldSpec('name', required=True, max_length=50),
        FieldSpec('description'),
    ) + tuple(extra)


RACES = ResourceConfig(
    key='races',
    label='race',
    model=models.Race,
    fields=_catalog_fields(),
    search_columns=('name', 'description'),
    guards=(ReferenceGuard('characters', 'race_id'),)
)

CHARACTER_TYPES = ResourceConfig(
    key='character-types',
    label='character type',
    model=models.CharacterType,
    fields=_catalog_fields(),
    search_columns=('name', 'description'),
    guards=(ReferenceGuard('character_character_types', 'character_type_id'),)
)

FRUIT_TYPES = ResourceConfig(
    key='fruit-types',
    label='fruit type',
    model=models.DevilFruitType,
    fields=_catalog_fields(),
    search_columns=('name', 'description'),
    guards=(ReferenceGuard('devil_fruits', 'type_id', ErrorCode.HAS_ASSOCIATIONS),)
)

HAKI_TYPES = ResourceConfig(
    key='haki-types',
    label='haki type',
    model=models.HakiType,
    fields=_catalog_fields([FieldSpec('color', max_length=50)]),
    search_columns=('name', 'description'),
    sortable=('name', 'color') + TIMESTAMP_SORTS,
    guards=(ReferenceGuard('character_haki', 'haki_type_id'),)
)

ORGANIZATION_TYPES = ResourceConfig(
    key='organization-types',
    label='organization type',
    model=models.OrganizationType,
    fields=_catalog_fields(),
    search_columns=('name', 'description'),
    guards=(ReferenceGuard('organizations', 'organization_type_id'),)
)

SHIPS = ResourceConfig(
    key='ships',
    label='ship',
    model=models.Ship,
    fields=(
        FieldSpec('name', required=True, max_length=100),
        FieldSpec('description'),
        FieldSpec('status', FieldKind.CHOICE, choices=models.SHIP_STATUSES),
        FieldSpec('image_url', max_length=255),
    ),
    search_columns=('name',),
    sortable=('name', 'status') + TIMESTAMP_SORTS,
    filters=(FilterSpec('status', 'status', FilterKind.CHOICE, choices=models.SHIP_STATUSES),),
    guards=(ReferenceGuard('organizations', 'ship_id'),),
    includes=(Include('organizations', 'organizations', ('id', 'name', 'status'), many=True),)
)

CHARACTERS = ResourceConfig(
    key='characters',
    label='character',
    model=models.Character,
    fields=(
        FieldSpec('name', required=True, max_length=100),
        FieldSpec('alias', max_length=100),
        FieldSpec('race_id', FieldKind.REFERENCE, references='races'),
        FieldSpec('age', FieldKind.INTEGER, min_value=0),
        FieldSpec('birthday', max_length=20),
        FieldSpec('height', max_length=20),
        FieldSpec('bounty', FieldKind.INTEGER, min_value=0),
        FieldSpec('origin', max_length=100),
        FieldSpec('status', FieldKind.CHOICE, choices=models.CHARACTER_STATUSES),
        FieldSpec('description'),
        FieldSpec('image_url', max_length=255),
        FieldSpec('debut', max_length=100),
    ),
    search_columns=('name', 'alias', 'description'),
    sortable=('name', 'bounty', 'age') + TIMESTAMP_SORTS,
    filters=(
        FilterSpec('race_id', 'race_id', FilterKind.ID),
        FilterSpec('status', 'status', FilterKind.CHOICE, choices=models.CHARACTER_STATUSES),
        FilterSpec('is_alive', 'status', FilterKind.FLAG, flag_value='alive'),
    ),
    ranges=(RangeSpec('bounty', 'bounty'),),
    guards=(
        ReferenceGuard('devil_fruits', 'current_user_id', ErrorCode.HAS_ASSOCIATIONS),
        ReferenceGuard('organizations', 'leader_id', ErrorCode.HAS_ASSOCIATIONS),
        ReferenceGuard('character_organizations', 'character_id', ErrorCode.HAS_ASSOCIATIONS),
        ReferenceGuard('character_devil_fruits', 'character_id', ErrorCode.HAS_ASSOCIATIONS),
        ReferenceGuard('character_haki', 'character_id', ErrorCode.HAS_ASSOCIATIONS),
        ReferenceGuard('character_character_types', 'character_id', ErrorCode.HAS_ASSOCIATIONS),
    ),
    includes=(
        Include('race', 'race', ('id', 'name', 'description')),
        Include('character_types', 'character_types', ('id', 'name', 'description'), many=True),
    )
)

DEVIL_FRUITS = ResourceConfig(
    key='devil-fruits',
    label='devil fruit',
    model=models.DevilFruit,
    fields=(
        FieldSpec('name', required=True, max_length=100),
        FieldSpec('japanese_name', max_length=100),
        FieldSpec('type_id', FieldKind.REFERENCE, required=True, references='devil_fruit_types'),
        FieldSpec('description'),
        FieldSpec('abilities'),
        FieldSpec('weaknesses'),
        FieldSpec('awakening_description'),
        FieldSpec('current_user_id', FieldKind.REFERENCE, references='characters'),
        FieldSpec('image_url', max_length=255),
    ),
    search_columns=('name', 'japanese_name', 'description'),
    sortable=('name', 'japanese_name') + TIMESTAMP_SORTS,
    filters=(
        FilterSpec('type_id', 'type_id', FilterKind.ID),
        FilterSpec('current_user_id', 'current_user_id', FilterKind.ID),
    ),
    guards=(ReferenceGuard('character_devil_fruits', 'devil_fruit_id', ErrorCode.HAS_ASSOCIATIONS),),
    includes=(
        Include('type', 'type', ('id', 'name', 'description')),
        Include('current_user', 'current_user'),
    )
)

ORGANIZATIONS = ResourceConfig(
    key='organizations',
    label='organization',
    model=models.Organization,
    fields=(
        FieldSpec('name', required=True, max_length=100),
        FieldSpec('organization_type_id', FieldKind.REFERENCE, required=True, references='organization_types'),
        FieldSpec('leader_id', FieldKind.REFERENCE, references='characters'),
        FieldSpec('ship_id', FieldKind.REFERENCE, references='ships'),
        FieldSpec('flag_description'),
        FieldSpec('jolly_roger_url', max_length=255),
        FieldSpec('base_location', max_length=100),
        FieldSpec('total_bounty', FieldKind.INTEGER, min_value=0),
        FieldSpec('status', FieldKind.CHOICE, choices=models.ORGANIZATION_STATUSES),
        FieldSpec('description'),
        FieldSpec('founded_date', max_length=50),
    ),
    search_columns=('name', 'description', 'base_location'),
    sortable=('name', 'total_bounty', 'status') + TIMESTAMP_SORTS,
    filters=(
        FilterSpec('status', 'status', FilterKind.CHOICE, choices=models.ORGANIZATION_STATUSES),
        FilterSpec('organization_type_id', 'organization_type_id', FilterKind.ID),
        FilterSpec('ship_id', 'ship_id', FilterKind.ID),
        FilterSpec('leader_id', 'leader_id', FilterKind.ID),
    ),
    ranges=(RangeSpec('total_bounty', 'total_bounty'),),
    guards=(ReferenceGuard('character_organizations', 'organization_id', ErrorCode.HAS_ASSOCIATIONS),),
    includes=(
        Include('organizationType', 'organization_type', ('id', 'name', 'description')),
        Include('leader', 'leader', ('id', 'name', 'alias', 'bounty')),
        Include('ship', 'ship', ('id', 'name', 'status')),
    ),
    listings=(
        Listing(
            'members',
            models.CharacterOrganization,
            'organization_id',
            Include('character', 'character', ('id', 'name', 'alias', 'bounty', 'status')),
            order_by=(('is_current', 'desc'), ('role', 'asc'))
        ),
    )
)

RESOURCES: Dict[str, ResourceConfig] = {
    config.key: config for config in (
        RACES,
        CHARACTER_TYPES,
        FRUIT_TYPES,
        HAKI_TYPES,
        ORGANIZATION_TYPES,
        SHIPS,
        CHARACTERS,
        DEVIL_FRUITS,
        ORGANIZATIONS,
    )
}
