from rest_framework import serializers


class LayoutSerializer(serializers.Serializer):
    displayName = serializers.CharField(source='display_name', max_length=255, required=False)
    positionX = serializers.IntegerField(source='position_x', min_value=0, required=False)
    positionY = serializers.IntegerField(source='position_y', min_value=0, required=False)
    width = serializers.IntegerField(min_value=1, max_value=12, required=False)
    height = serializers.IntegerField(min_value=1, max_value=12, required=False)
    color = serializers.CharField(max_length=128, allow_blank=True, required=False)
    route = serializers.CharField(max_length=255, required=False)


class LayoutPositionSerializer(serializers.Serializer):
    x = serializers.IntegerField(min_value=0)
    y = serializers.IntegerField(min_value=0)
    w = serializers.IntegerField(min_value=1, max_value=12)
    h = serializers.IntegerField(min_value=1, max_value=12)


class LayoutNameSerializer(serializers.Serializer):
    displayName = serializers.CharField(max_length=255)


class LayoutColorSerializer(serializers.Serializer):
    color = serializers.CharField(max_length=128, allow_blank=True)
