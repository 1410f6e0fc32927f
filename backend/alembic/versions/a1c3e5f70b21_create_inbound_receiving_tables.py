"""create inbound receiving tables

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-19 09:12:40.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f70b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Product, Location, InboundReceipt and children."""
    op.create_table(
        'Product',
        sa.Column('ProductID', sa.String(36), primary_key=True),
        sa.Column('Sku', sa.String(100), nullable=False, unique=True),
        sa.Column('Barcode', sa.String(100)),
        sa.Column('Name', sa.String(200), nullable=False),
    )
    op.create_index('ix_Product_Barcode', 'Product', ['Barcode'])

    op.create_table(
        'Location',
        sa.Column('LocationID', sa.String(36), primary_key=True),
        sa.Column('OrgID', sa.String(36), nullable=False),
        sa.Column('Code', sa.String(50), nullable=False),
        sa.Column('Type_s', sa.String(20), nullable=False),
        sa.Column('Status_s', sa.String(20), nullable=False, server_default=sa.text("'ACTIVE'")),
        sa.CheckConstraint("Status_s IN ('ACTIVE','INACTIVE')", name='CK_Location_Status'),
    )
    op.create_index('ix_Location_OrgID', 'Location', ['OrgID'])

    op.create_table(
        'InboundReceipt',
        sa.Column('ReceiptID', sa.String(36), primary_key=True),
        sa.Column('OrgID', sa.String(36), nullable=False),
        sa.Column('ClientRef', sa.String(100), nullable=False),
        sa.Column('ReceiptNo', sa.String(50), nullable=False, unique=True),
        sa.Column('Status_s', sa.String(20), nullable=False, server_default=sa.text("'DRAFT'")),
        sa.Column('Version', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('HasIssue', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('CreatedAt', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('UpdatedAt', sa.DateTime()),
        sa.Column('ConfirmedAt', sa.DateTime()),
        sa.Column('ConfirmedBy', sa.String(100)),
        sa.CheckConstraint(
            "Status_s IN ('DRAFT','PHOTO_REQUIRED','COUNTING','CONFIRMED','PUTAWAY_READY')",
            name='CK_InboundReceipt_Status',
        ),
        sa.CheckConstraint('Version >= 0', name='CK_InboundReceipt_Version'),
    )
    op.create_index('ix_InboundReceipt_OrgID', 'InboundReceipt', ['OrgID'])

    op.create_table(
        'InboundPlanLine',
        sa.Column('PlanLineID', sa.String(36), primary_key=True),
        sa.Column('ReceiptID', sa.String(36), sa.ForeignKey('InboundReceipt.ReceiptID'), nullable=False),
        sa.Column('ProductID', sa.String(36), sa.ForeignKey('Product.ProductID'), nullable=False),
        sa.Column('ExpectedQty', sa.Integer(), nullable=False),
        sa.Column('SortOrder', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.CheckConstraint('ExpectedQty >= 0', name='CK_InboundPlanLine_ExpectedQty'),
    )
    op.create_index('ix_InboundPlanLine_ReceiptID', 'InboundPlanLine', ['ReceiptID'])

    op.create_table(
        'InboundReceiptLine',
        sa.Column('ReceiptLineID', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('ReceiptID', sa.String(36), sa.ForeignKey('InboundReceipt.ReceiptID'), nullable=False),
        sa.Column('PlanLineID', sa.String(36), sa.ForeignKey('InboundPlanLine.PlanLineID'), nullable=False),
        sa.Column('ReceivedQty', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('DamagedQty', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('MissingQty', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('OtherQty', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('LocationID', sa.String(36), sa.ForeignKey('Location.LocationID')),
        sa.Column('InspectedBy', sa.String(100)),
        sa.Column('InspectedAt', sa.DateTime()),
        sa.UniqueConstraint('ReceiptID', 'PlanLineID', name='UQ_InboundReceiptLine_PlanLine'),
        sa.CheckConstraint(
            'ReceivedQty >= 0 AND DamagedQty >= 0 AND MissingQty >= 0 AND OtherQty >= 0',
            name='CK_InboundReceiptLine_Qty_NonNegative',
        ),
    )
    op.create_index('ix_InboundReceiptLine_ReceiptID', 'InboundReceiptLine', ['ReceiptID'])

    op.create_table(
        'InboundPhotoSlot',
        sa.Column('SlotID', sa.String(36), primary_key=True),
        sa.Column('ReceiptID', sa.String(36), sa.ForeignKey('InboundReceipt.ReceiptID'), nullable=False),
        sa.Column('SlotKey', sa.String(50), nullable=False),
        sa.Column('Title', sa.String(200), nullable=False),
        sa.Column('Step', sa.Integer(), nullable=False),
        sa.Column('MinPhotos', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('MaxPhotos', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.Column('SortOrder', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.CheckConstraint('Step IN (1,2,3)', name='CK_InboundPhotoSlot_Step'),
        sa.CheckConstraint('MinPhotos >= 0', name='CK_InboundPhotoSlot_Min'),
        sa.CheckConstraint('MaxPhotos >= 1', name='CK_InboundPhotoSlot_Max'),
    )
    op.create_index('ix_InboundPhotoSlot_ReceiptID', 'InboundPhotoSlot', ['ReceiptID'])

    op.create_table(
        'InboundPhoto',
        sa.Column('PhotoID', sa.String(36), primary_key=True),
        sa.Column('ReceiptID', sa.String(36), sa.ForeignKey('InboundReceipt.ReceiptID'), nullable=False),
        sa.Column('SlotID', sa.String(36), sa.ForeignKey('InboundPhotoSlot.SlotID'), nullable=False),
        sa.Column('StoragePath', sa.String(500), nullable=False),
        sa.Column('Source', sa.String(10), nullable=False),
        sa.Column('MimeType', sa.String(100)),
        sa.Column('UploadedBy', sa.String(100)),
        sa.Column('UploadedAt', sa.DateTime(), nullable=False),
        sa.Column('IsDeleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("Source IN ('camera','album')", name='CK_InboundPhoto_Source'),
    )
    op.create_index('ix_InboundPhoto_ReceiptID', 'InboundPhoto', ['ReceiptID'])
    op.create_index('ix_InboundPhoto_SlotID', 'InboundPhoto', ['SlotID'])

    op.create_table(
        'InboundEvent',
        sa.Column('EventID', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('ReceiptID', sa.String(36), sa.ForeignKey('InboundReceipt.ReceiptID'), nullable=False),
        sa.Column('EventType', sa.String(30), nullable=False),
        sa.Column('Payload', sa.Text()),
        sa.Column('ActorID', sa.String(100)),
        sa.Column('CreatedAt', sa.DateTime(), nullable=False, server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_InboundEvent_ReceiptID', 'InboundEvent', ['ReceiptID'])


def downgrade() -> None:
    op.drop_table('InboundEvent')
    op.drop_table('InboundPhoto')
    op.drop_table('InboundPhotoSlot')
    op.drop_table('InboundReceiptLine')
    op.drop_table('InboundPlanLine')
    op.drop_table('InboundReceipt')
    op.drop_table('Location')
    op.drop_table('Product')
