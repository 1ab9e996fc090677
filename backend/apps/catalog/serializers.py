from rest_framework import serializers


class ProductSnapshotSerializer(serializers.Serializer):
    # Matches the product document shape denormalized into cart line items
    id = serializers.CharField()
    name = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    price = serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=0
    )
    imageURL = serializers.CharField(allow_blank=True, required=False, default="")
    stock = serializers.IntegerField(min_value=0, required=False, default=0)
    category = serializers.CharField(allow_blank=True, required=False, default="")
    createdAt = serializers.CharField(allow_blank=True, required=False, default="")
    updatedAt = serializers.CharField(allow_blank=True, required=False, default="")
