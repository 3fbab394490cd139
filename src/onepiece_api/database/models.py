# src/onepiece_api/database/models.py
"""
SQLAlchemy models for the catalog.

Five catalog tables (races, character types, devil fruit types, haki types,
organization types), ships, the three main tables (characters, devil fruits,
organizations) and four junction tables linking characters to the rest.
Timestamps are filled by the database.
"""
from sqlalchemy import (
    Column, Integer, BigInteger, String, Text, Boolean, DateTime, Enum,
    ForeignKey, UniqueConstraint, func
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

SHIP_STATUSES = ('active', 'destroyed', 'retired')
CHARACTER_STATUSES = ('alive', 'deceased', 'unknown')
ORGANIZATION_STATUSES = ('active', 'disbanded', 'destroyed')
MASTERY_LEVELS = ('basic', 'intermediate', 'advanced', 'master')


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())


class Race(TimestampMixin, Base):
    __tablename__ = 'races'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text)

    characters = relationship('Character', back_populates='race')


class CharacterType(TimestampMixin, Base):
    __tablename__ = 'character_types'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text)


class DevilFruitType(TimestampMixin, Base):
    __tablename__ = 'devil_fruit_types'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text)

    devil_fruits = relationship('DevilFruit', back_populates='type')


class HakiType(TimestampMixin, Base):
    __tablename__ = 'haki_types'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text)
    color = Column(String(50))


class OrganizationType(TimestampMixin, Base):
    __tablename__ = 'organization_types'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text)

    organizations = relationship('Organization', back_populates='organization_type')


class Ship(TimestampMixin, Base):
    __tablename__ = 'ships'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text)
    status = Column(Enum(*SHIP_STATUSES, name='ship_status'), nullable=False,
                    default='active', server_default='active', index=True)
    image_url = Column(String(255))

    organizations = relationship('Organization', back_populates='ship')


class Character(TimestampMixin, Base):
    __tablename__ = 'characters'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    alias = Column(String(100), index=True)
    race_id = Column(Integer, ForeignKey('races.id', ondelete='RESTRICT'), index=True)
    age = Column(Integer)
    birthday = Column(String(20))
    height = Column(String(20))
    # Berries
    bounty = Column(BigInteger, default=0, server_default='0', index=True)
    origin = Column(String(100))
    status = Column(Enum(*CHARACTER_STATUSES, name='character_status'), nullable=False,
                    default='alive', server_default='alive', index=True)
    description = Column(Text)
    image_url = Column(String(255))
    # First appearance (chapter/episode)
    debut = Column(String(100))

    race = relationship('Race', back_populates='characters')
    devil_fruits = relationship('DevilFruit', back_populates='current_user')
    led_organizations = relationship('Organization', back_populates='leader')
    character_types = relationship('CharacterType', secondary='character_character_types',
                                   viewonly=True, order_by='CharacterType.name')


class DevilFruit(TimestampMixin, Base):
    __tablename__ = 'devil_fruits'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    japanese_name = Column(String(100))
    type_id = Column(Integer, ForeignKey('devil_fruit_types.id', ondelete='RESTRICT'),
                     nullable=False, index=True)
    description = Column(Text)
    abilities = Column(Text)
    weaknesses = Column(Text)
    awakening_description = Column(Text)
    current_user_id = Column(Integer, ForeignKey('characters.id', ondelete='SET NULL'), index=True)
    image_url = Column(String(255))

    type = relationship('DevilFruitType', back_populates='devil_fruits')
    current_user = relationship('Character', back_populates='devil_fruits')


class Organization(TimestampMixin, Base):
    __tablename__ = 'organizations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    organization_type_id = Column(Integer, ForeignKey('organization_types.id', ondelete='RESTRICT'),
                                  nullable=False, index=True)
    leader_id = Column(Integer, ForeignKey('characters.id', ondelete='SET NULL'), index=True)
    ship_id = Column(Integer, ForeignKey('ships.id', ondelete='SET NULL'), index=True)
    flag_description = Column(Text)
    jolly_roger_url = Column(String(255))
    base_location = Column(String(100))
    total_bounty = Column(BigInteger, default=0, server_default='0')
    status = Column(Enum(*ORGANIZATION_STATUSES, name='organization_status'), nullable=False,
                    default='active', server_default='active', index=True)
    description = Column(Text)
    founded_date = Column(String(50))

    organization_type = relationship('OrganizationType', back_populates='organizations')
    leader = relationship('Character', back_populates='led_organizations')
    ship = relationship('Ship', back_populates='organizations')


class CharacterOrganization(TimestampMixin, Base):
    __tablename__ = 'character_organizations'
    __table_args__ = (UniqueConstraint('character_id', 'organization_id', name='uk_character_organization'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey('characters.id', ondelete='CASCADE'), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True)
    role = Column(String(100))
    joined_date = Column(String(50))
    left_date = Column(String(50))
    is_current = Column(Boolean, default=True, server_default='1')

    character = relationship('Character')


class CharacterDevilFruit(TimestampMixin, Base):
    __tablename__ = 'character_devil_fruits'
    __table_args__ = (UniqueConstraint('character_id', 'devil_fruit_id', name='uk_character_fruit'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey('characters.id', ondelete='CASCADE'), nullable=False, index=True)
    devil_fruit_id = Column(Integer, ForeignKey('devil_fruits.id', ondelete='CASCADE'), nullable=False, index=True)
    acquired_date = Column(String(50))
    is_current = Column(Boolean, default=True, server_default='1')
    notes = Column(Text)


class CharacterHaki(TimestampMixin, Base):
    __tablename__ = 'character_haki'
    __table_args__ = (UniqueConstraint('character_id', 'haki_type_id', name='uk_character_haki'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey('characters.id', ondelete='CASCADE'), nullable=False, index=True)
    haki_type_id = Column(Integer, ForeignKey('haki_types.id', ondelete='CASCADE'), nullable=False, index=True)
    mastery_level = Column(Enum(*MASTERY_LEVELS, name='haki_mastery_level'), default='basic', server_default='basic')
    awakened = Column(Boolean, default=False, server_default='0')
    notes = Column(Text)


class CharacterCharacterType(TimestampMixin, Base):
    __tablename__ = 'character_character_types'
    __table_args__ = (UniqueConstraint('character_id', 'character_type_id', name='uk_character_type'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey('characters.id', ondelete='CASCADE'), nullable=False, index=True)
    character_type_id = Column(Integer, ForeignKey('character_types.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    acquired_date = Column(String(50))
    is_current = Column(Boolean, default=True, server_default='1')


# Tables the diagnostics report checks, parents first
EXPECTED_TABLES = [
    'races',
    'character_types',
    'devil_fruit_types',
    'haki_types',
    'organization_types',
    'ships',
    'characters',
    'devil_fruits',
    'organizations',
    'character_organizations',
    'character_devil_fruits',
    'character_haki',
    'character_character_types'
]
