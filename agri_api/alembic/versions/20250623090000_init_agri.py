from alembic import op
import sqlalchemy as sa

revision='20250623090000'
down_revision=None

def upgrade():
    op.create_table('users', sa.Column('id', sa.String(36), primary_key=True), sa.Column('email', sa.String(255), nullable=False, unique=True), sa.Column('password_hash', sa.String(255), nullable=False), sa.Column('full_name', sa.String(200)), sa.Column('address', sa.String(300)), sa.Column('phone_number', sa.String(32)), sa.Column('role', sa.String(32), nullable=True), sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()), sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()))
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_table('categories', sa.Column('id', sa.String(36), primary_key=True), sa.Column('name', sa.String(120), nullable=False))
    op.create_index('ix_categories_name_lower', 'categories', [sa.text('lower(name)')], unique=True)
    op.create_table('products', sa.Column('id', sa.String(36), primary_key=True), sa.Column('name', sa.String(100), nullable=False), sa.Column('description', sa.Text()), sa.Column('price', sa.Numeric(12, 2), nullable=False), sa.Column('quantity', sa.Integer(), nullable=False), sa.Column('production_date', sa.DateTime(), nullable=False), sa.Column('farmer_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False), sa.Column('category_id', sa.String(36), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False))
    op.create_index('ix_products_farmer_id', 'products', ['farmer_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])

def downgrade():
    op.drop_table('products'); op.drop_table('categories'); op.drop_table('users')
