from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Locations(Base):
    __tablename__ = 'locations'

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    services = relationship('Services', back_populates='location')
    settings = relationship('LocationSettings', back_populates='location')
    blocked_slots = relationship('BlockedSlots', back_populates='location')
    bookings = relationship('Bookings', back_populates='location')


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        CheckConstraint('duration_in_minutes > 0'),
    )

    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_in_minutes = Column(Integer, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    display_order = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    price = Column(Float)
    description = Column(Text)

    location = relationship('Locations', back_populates='services')


class LocationSettings(Base):
    """Bay capacity: key is "global" or a yyyy-mm-dd daily override."""
    __tablename__ = 'location_settings'
    __table_args__ = (
        UniqueConstraint('location_id', 'key'),
        CheckConstraint('active_bays >= 1'),
    )

    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    key = Column(Text, nullable=False)
    active_bays = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    location = relationship('Locations', back_populates='settings')


class BlockedSlots(Base):
    __tablename__ = 'blocked_slots'
    __table_args__ = (
        UniqueConstraint('location_id', 'key'),
    )

    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    key = Column(Text, nullable=False)  # "{date}_{time_slot}"
    date = Column(Text, nullable=False)
    time_slot = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    created_by = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    location = relationship('Locations', back_populates='blocked_slots')


class Users(Base):
    __tablename__ = 'users'

    id = Column(Text, primary_key=True)  # identity provider subject
    name = Column(Text)
    email = Column(Text)
    role = Column(Text, nullable=False, server_default=text("'customer'"))
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    rewards = relationship('Rewards', back_populates='user')


class Rewards(Base):
    __tablename__ = 'rewards'
    __table_args__ = (
        UniqueConstraint('user_id', 'location_id'),
        CheckConstraint('loyalty_points >= 0'),
        CheckConstraint('free_washes >= 0'),
    )

    user_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    # weak reference: rewards survive location lifecycle
    location_id = Column(Text, nullable=False)
    loyalty_points = Column(Integer, nullable=False, server_default=text('0'))
    free_washes = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)

    user = relationship('Users', back_populates='rewards')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        UniqueConstraint('location_id', 'start_time', 'bay_id'),
        CheckConstraint('bay_id >= 1'),
    )

    location_id = Column(ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    # no FKs: the profile is created after the booking write,
    # and a service may be removed while its bookings stay
    user_id = Column(Text, nullable=False, index=True)
    service_id = Column(Integer, nullable=False)
    start_time = Column(DateTime, nullable=False, index=True)  # naive UTC
    status = Column(Text, nullable=False)  # paid | free
    bay_id = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    duration_in_minutes = Column(Integer)
    payment_reference = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    location = relationship('Locations', back_populates='bookings')
