from rest_framework import serializers

from .services.records import (
    MAX_WEIGHT_KG,
    MIN_WEIGHT_KG,
    Product,
    ProductStatus,
    QualityParameter,
    QualityThreshold,
    Silo,
)


class QuotaSerializer(serializers.Serializer):
    plate = serializers.CharField(max_length=16, trim_whitespace=True)
    product_code = serializers.CharField(max_length=20)
    quota_date = serializers.DateField()


class ArrivalSerializer(serializers.Serializer):
    plate = serializers.CharField(max_length=16, trim_whitespace=True)


class QualitySerializer(ArrivalSerializer):
    measurements = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=4),
        allow_empty=True,
    )


class WeighingSerializer(ArrivalSerializer):
    weight = serializers.IntegerField(min_value=MIN_WEIGHT_KG, max_value=MAX_WEIGHT_KG)
    confirmed = serializers.BooleanField(default=False)


class ProductSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100)
    status = serializers.ChoiceField(choices=ProductStatus.CHOICES, default=ProductStatus.ACTIVE)

    def to_record(self):
        return Product(**self.validated_data)


class ParameterSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100)

    def to_record(self):
        return QualityParameter(**self.validated_data)


class ThresholdSerializer(serializers.Serializer):
    product_code = serializers.CharField(max_length=20)
    parameter = serializers.CharField(max_length=20)
    min_value = serializers.DecimalField(max_digits=12, decimal_places=4)
    max_value = serializers.DecimalField(max_digits=12, decimal_places=4)

    def validate(self, attrs):
        if attrs["min_value"] > attrs["max_value"]:
            raise serializers.ValidationError("min_value cannot exceed max_value.")
        return attrs

    def to_record(self):
        return QualityThreshold(**self.validated_data)


class SiloSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100)
    product_code = serializers.CharField(max_length=20)
    stock = serializers.IntegerField(min_value=0, default=0)
    capacity = serializers.IntegerField(min_value=0)

    def validate(self, attrs):
        if attrs["capacity"] < attrs["stock"]:
            raise serializers.ValidationError("capacity cannot be below stock.")
        return attrs

    def to_record(self):
        return Silo(**self.validated_data)
