from alembic import op
import sqlalchemy as sa

revision='20250702110000'
down_revision='20250623090000'

categories = sa.table('categories', sa.column('id', sa.String), sa.column('name', sa.String), sa.column('name_key', sa.String))

def upgrade():
    # plain ADD COLUMN; a batch rebuild of categories would trip the products foreign key
    op.add_column('categories', sa.Column('name_key', sa.String(120), nullable=True))
    # sqlite lower() only folds ASCII, so the key is computed here
    conn = op.get_bind()
    for cid, name in conn.execute(sa.select(categories.c.id, categories.c.name)).all():
        conn.execute(categories.update().where(categories.c.id == cid).values(name_key=name.strip().casefold()))
    op.drop_index('ix_categories_name_lower', table_name='categories')
    op.create_index('uq_categories_name_key', 'categories', ['name_key'], unique=True)

def downgrade():
    op.drop_index('uq_categories_name_key', table_name='categories')
    op.create_index('ix_categories_name_lower', 'categories', [sa.text('lower(name)')], unique=True)
    with op.batch_alter_table('categories') as batch:
        batch.drop_column('name_key')
