"""create_user_profiles_table

Revision ID: 4b7d2e9a61c3
Revises:
Create Date: 2026-10-18 09:12:44.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7d2e9a61c3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


profile_created_by = sa.Enum(
    'Self', 'Brother', 'Sister', 'Parents', 'Friend', 'Relative',
    name='profile_created_by',
)
community_type = sa.Enum(
    'A muslim', 'Hanafi', 'Salafi', 'Sunni', 'Thableegh', 'Shia', 'Jamat Islami',
    name='community_type',
)
nationality_type = sa.Enum('India', 'UAE', 'UK', 'USA', name='nationality_type')
marital_status_type = sa.Enum(
    'Never married', 'Widower', 'Divorced', 'Nikah Divorce',
    name='marital_status_type',
)
home_district_type = sa.Enum(
    'Thiruvananthapuram', 'Kollam', 'Pathanamthitta', 'Alappuzha', 'Kottayam',
    'Idukki', 'Ernakulam', 'Thrissur', 'Palakkad', 'Malappuram', 'Kozhikode',
    'Wayanad', 'Kannur', 'Kasaragod',
    name='home_district_type',
)


def upgrade() -> None:
    """Create the user_profiles table and its enumerated types."""
    op.create_table('user_profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('is_groom', sa.Boolean(), nullable=False),
        sa.Column('profile_created_by', profile_created_by, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('community', community_type, nullable=False),
        sa.Column('nationality', nationality_type, nullable=False),
        sa.Column('height', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('weight', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('marital_status', marital_status_type, nullable=False),
        sa.Column('is_physically_challenged', sa.Boolean(),
                  server_default=sa.false(), nullable=False),
        sa.Column('home_district', home_district_type, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_profiles_deleted_at', 'user_profiles', ['deleted_at'], unique=False)

    # One active profile per account; soft-deleted rows do not count
    op.create_index('uq_user_profiles_user_id_active', 'user_profiles', ['user_id'],
                    unique=True,
                    postgresql_where=sa.text('deleted_at IS NULL'))


def downgrade() -> None:
    """Drop the user_profiles table and its enumerated types."""
    op.drop_index('uq_user_profiles_user_id_active', table_name='user_profiles')
    op.drop_index('ix_user_profiles_deleted_at', table_name='user_profiles')
    op.drop_table('user_profiles')

    bind = op.get_bind()
    for enum_type in (
        home_district_type,
        marital_status_type,
        nationality_type,
        community_type,
        profile_created_by,
    ):
        enum_type.drop(bind, checkfirst=True)
