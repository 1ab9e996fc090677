from rest_framework import serializers

from apps.catalog.serializers import ProductSnapshotSerializer


class CartLineItemSerializer(serializers.Serializer):
    productId = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    product = ProductSnapshotSerializer()
