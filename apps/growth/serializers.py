# apps/growth/serializers.py
from rest_framework import serializers

from apps.trading.quarters import QUARTERS, quarter_of_month

from .models import GrowthAccount

DUPLICATE_MONTH_MESSAGE = (
    "Ya existe una cuenta para {month}. Solo se permite un registro por mes."
)


class GrowthAccountSerializer(serializers.ModelSerializer):
    """
    Growth account row. Year, quarter and month are fixed once created.
    The duplicate-month rule is checked here, not in the database.
    """

    class Meta:
        model = GrowthAccount
        fields = [
            'id',
            'account_name',
            'broker',
            'purpose',
            'year',
            'quarter',
            'month',
            'initial_capital',
            'monthly_gain',
            'monthly_target',
            'monthly_average',
            'cycle',
            'status',
        ]
        read_only_fields = ['id']

    def validate(self, attrs):
        if self.instance is not None:
            for field in ('year', 'quarter', 'month'):
                attrs.pop(field, None)
        else:
            quarter = attrs.get('quarter')
            month = attrs.get('month')
            if month and quarter_of_month(month) != quarter:
                raise serializers.ValidationError(
                    {'month': f"{month} is not part of Q{quarter}"}
                )

            user = self.context['request'].user
            exists = GrowthAccount.objects.filter(
                user=user,
                year=attrs.get('year'),
                quarter=quarter,
                month=month,
            ).exists()
            if exists:
                raise serializers.ValidationError(
                    {'month': DUPLICATE_MONTH_MESSAGE.format(month=month)}
                )

        purpose = attrs.get('purpose', getattr(self.instance, 'purpose', None))
        if purpose not in GrowthAccount.PHASED_PURPOSES:
            attrs['cycle'] = None

        return attrs


class GrowthFilterSerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False)
    quarter = serializers.ChoiceField(required=False, choices=sorted(QUARTERS))
    account = serializers.CharField(required=False, allow_blank=True)
