from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsHospitalStaff
from core.serializers.invoice import PaymentCreateSerializer, PaymentListQuerySerializer, RefundSerializer
from core.services.common import page_meta
from core.services.invoices import format_payment
from core.services.payments import create_payment, list_payments, refund_payment


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def payments(request):
    """Apply a payment to an invoice."""
    s = PaymentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    p = create_payment(
        request.user, vd['invoiceId'], vd['amount'], vd['method'],
        card_number=vd.get('cardNumber') or '',
        card_company=vd.get('cardCompany') or '',
        card_approval_no=vd.get('cardApprovalNo') or '',
        card_installment=vd.get('cardInstallment'),
        notes=vd.get('notes') or '',
    )
    return Response({'ok': True, 'data': format_payment(p)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_list(request):
    q = PaymentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    data, total = list_payments(
        request.user,
        hospital_id=vd.get('hospitalId'),
        invoice_id=vd.get('invoiceId'),
        status=vd.get('status'),
        method=vd.get('method'),
        start_date=vd.get('startDate'),
        end_date=vd.get('endDate'),
        page=vd['page'],
        limit=vd['limit'],
    )
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def payment_refund(request, payment_id: int):
    s = RefundSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    p = refund_payment(request.user, payment_id, s.validated_data['amount'], s.validated_data['reason'])
    return Response({'ok': True, 'data': format_payment(p)})
