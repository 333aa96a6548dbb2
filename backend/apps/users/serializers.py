"""
Serializers for users app.
"""

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from rest_framework import exceptions, serializers
from rest_framework.validators import UniqueValidator

from .tokens import parse_scopes, unknown_scopes


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model with profile fields flattened.
    """
    name = serializers.CharField(source='profile.name', read_only=True)
    country = serializers.CharField(source='profile.country', read_only=True)
    current_team_id = serializers.IntegerField(source='profile.current_team_id', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'country', 'current_team_id', 'date_joined']
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    """
    Serializer for user registration.
    The email doubles as the username.
    """
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(
        max_length=150,
        validators=[
            UniqueValidator(
                queryset=User.objects.all(),
                lookup='iexact',
                message='The email has already been taken.',
            )
        ]
    )
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirmation = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    country = serializers.RegexField(
        r'^[A-Za-z]{2}$',
        error_messages={'invalid': 'Use a two letter country code.'}
    )

    def validate_email(self, value):
        return value.lower()

    def validate_country(self, value):
        return value.upper()

    def validate(self, attrs):
        """
        Validate that passwords match.
        """
        if attrs['password'] != attrs['password_confirmation']:
            raise serializers.ValidationError({
                "password": ["The password confirmation does not match."]
            })
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        """
        Create new user with hashed password and fill the profile.
        """
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password']
        )
        profile = user.profile
        profile.name = validated_data['name']
        profile.country = validated_data['country']
        profile.save(update_fields=['name', 'country', 'updated_at'])
        return user


class UserLoginSerializer(serializers.Serializer):
    """
    Password grant: email + password, optional space separated scope.
    """
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    scope = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_scope(self, value):
        scopes = parse_scopes(value)
        unknown = unknown_scopes(scopes)
        if unknown:
            raise serializers.ValidationError(f"Unknown scope: {', '.join(unknown)}.")
        return scopes

    def validate(self, attrs):
        """
        Validate credentials and authenticate user.
        Wrong credentials are answered with 401.
        """
        email = attrs.get('email', '').lower()

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise exceptions.AuthenticationFailed("These credentials do not match our records.")

        authenticated_user = authenticate(username=user.username, password=attrs.get('password'))
        if authenticated_user is None:
            raise exceptions.AuthenticationFailed("These credentials do not match our records.")

        attrs['user'] = authenticated_user
        attrs['scope'] = attrs.get('scope') or parse_scopes('')
        return attrs


class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False, allow_blank=True)


class TokenSerializer(serializers.Serializer):
    """
    Shape of the token response (documentation only).
    """
    token_type = serializers.CharField()
    expires_in = serializers.IntegerField()
    access_token = serializers.CharField()
    refresh_token = serializers.CharField()


class PasswordUpdateSerializer(serializers.Serializer):
    """
    Serializer for changing password.
    """
    current = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirmation = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_current(self, value):
        """
        Validate that the current password is correct.
        """
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError("These credentials do not match our records.")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirmation']:
            raise serializers.ValidationError({
                "password": ["The password confirmation does not match."]
            })
        return attrs
